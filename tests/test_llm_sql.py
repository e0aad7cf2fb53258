"""Unit tests for NLQ LLM SQL generation module."""

from unittest.mock import Mock, patch

import httpx
import pytest
from openai import OpenAI, OpenAIError

from mysqlchat.nlq.llm_sql import SqlGenerationError, generate_sql_candidate


class TestLLMSQLGeneration:
    """Tests for LLM-based SQL candidate generation."""

    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_successful_sql_generation(self, mock_openai_class, make_completion):
        """Test that the raw completion text is returned stripped."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = make_completion(
            "  SELECT * FROM users LIMIT 100 -- all users\n"
        )
        mock_openai_class.return_value = mock_client

        result = generate_sql_candidate("sk-test", "Show me all users")

        assert result == "SELECT * FROM users LIMIT 100 -- all users"
        mock_openai_class.assert_called_once_with(api_key="sk-test", base_url=None, max_retries=0)

    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_request_uses_system_prompt_and_zero_temperature(self, mock_openai_class, make_completion):
        """Test the shape of the chat completion request."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = make_completion("SELECT 1")
        mock_openai_class.return_value = mock_client

        generate_sql_candidate(
            "sk-test",
            "Pick 3 random products",
            schema_description="products(id, name, price)",
            max_rows=3,
        )

        call_kwargs = mock_client.chat.completions.create.call_args[1]
        messages = call_kwargs["messages"]

        assert call_kwargs["temperature"] == 0
        assert call_kwargs["model"] == "gpt-4"
        assert "max_tokens" not in call_kwargs
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "products(id, name, price)" in messages[0]["content"]
        assert "at most 3 rows" in messages[0]["content"]
        assert messages[1]["content"] == "Pick 3 random products"

    @pytest.mark.parametrize("content", [None, "", "   \n  "])
    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_empty_content_raises_error(self, mock_openai_class, content, make_completion):
        """Test that missing or blank content is a generation failure."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = make_completion(content)
        mock_openai_class.return_value = mock_client

        with pytest.raises(SqlGenerationError, match="No response from OpenAI"):
            generate_sql_candidate("sk-test", "Show me data")

    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_no_choices_raises_error(self, mock_openai_class):
        """Test that a response without choices is a generation failure."""
        mock_client = Mock()
        mock_response = Mock()
        mock_response.choices = []
        mock_client.chat.completions.create.return_value = mock_response
        mock_openai_class.return_value = mock_client

        with pytest.raises(SqlGenerationError, match="No response from OpenAI"):
            generate_sql_candidate("sk-test", "Show me data")

    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_no_message_raises_error(self, mock_openai_class):
        """Test that a choice without a message is a generation failure."""
        mock_client = Mock()
        mock_choice = Mock()
        mock_choice.message = None
        mock_response = Mock()
        mock_response.choices = [mock_choice]
        mock_client.chat.completions.create.return_value = mock_response
        mock_openai_class.return_value = mock_client

        with pytest.raises(SqlGenerationError, match="No response from OpenAI"):
            generate_sql_candidate("sk-test", "Show me data")

    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_openai_api_error_raises_sql_generation_error(self, mock_openai_class):
        """Test that OpenAI API errors are caught and wrapped."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = OpenAIError("API timeout")
        mock_openai_class.return_value = mock_client

        with pytest.raises(SqlGenerationError, match="API call failed"):
            generate_sql_candidate("sk-test", "Show me data")

        assert mock_client.chat.completions.create.call_count == 1

    @pytest.mark.parametrize("api_key", ["", "   "])
    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_missing_api_key_raises_error(self, mock_openai_class, api_key):
        """Test that a blank API key fails before any client is created."""
        with pytest.raises(SqlGenerationError, match="API key not provided"):
            generate_sql_candidate(api_key, "Show me data")

        mock_openai_class.assert_not_called()

    @patch("mysqlchat.nlq.llm_sql.settings")
    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_llm_disabled_raises_error(self, mock_openai_class, mock_settings):
        """Test that error is raised when LLM is disabled."""
        mock_settings.LLM_ENABLED = False

        with pytest.raises(SqlGenerationError, match="disabled"):
            generate_sql_candidate("sk-test", "Show me data")

        mock_openai_class.assert_not_called()

    @patch("mysqlchat.nlq.llm_sql.settings")
    @patch("mysqlchat.nlq.llm_sql.OpenAI")
    def test_custom_endpoint_and_max_tokens(self, mock_openai_class, mock_settings, make_completion):
        """Test that configured base URL, model and max tokens are passed through."""
        mock_settings.LLM_ENABLED = True
        mock_settings.OPENAI_MODEL = "gpt-4o-mini"
        mock_settings.OPENAI_MAX_TOKENS = 300
        mock_settings.openai_base_url = "https://llm.internal/v1"

        mock_client = Mock()
        mock_client.chat.completions.create.return_value = make_completion("SELECT 1")
        mock_openai_class.return_value = mock_client

        generate_sql_candidate("sk-test", "Show me data")

        mock_openai_class.assert_called_once_with(
            api_key="sk-test", base_url="https://llm.internal/v1", max_retries=0
        )
        call_kwargs = mock_client.chat.completions.create.call_args[1]
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["max_tokens"] == 300

    def test_server_error_is_not_retried(self):
        """Test that a 500 from the API results in exactly one HTTP call."""
        requests_seen = []

        def handler(request):
            requests_seen.append(request)
            return httpx.Response(500, json={"error": {"message": "boom"}})

        def build_client(**kwargs):
            return OpenAI(
                http_client=httpx.Client(transport=httpx.MockTransport(handler)),
                **kwargs,
            )

        with patch("mysqlchat.nlq.llm_sql.OpenAI", side_effect=build_client):
            with pytest.raises(SqlGenerationError, match="API call failed"):
                generate_sql_candidate("sk-test", "how many users?")

        assert len(requests_seen) == 1
        assert requests_seen[0].url.path.endswith("/chat/completions")

"""Pytest configuration and shared fixtures."""

from contextlib import contextmanager
from unittest.mock import MagicMock, Mock

import pytest


@pytest.fixture
def make_completion():
    """Build a fake OpenAI chat completion carrying the given content."""

    def _make(content):
        mock_message = Mock()
        mock_message.content = content
        mock_choice = Mock()
        mock_choice.message = mock_message
        mock_response = Mock()
        mock_response.choices = [mock_choice]
        return mock_response

    return _make


@pytest.fixture
def chat_input_data():
    """Valid action input record using the plugin's wire keys."""
    return {
        "openaiApiKey": "sk-test",
        "host": "db.example.com",
        "port": "3306",
        "sslCert": "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n",
        "user": "reader",
        "password": "secret",
        "database": "shop",
        "question": "Show me all customers",
    }


@pytest.fixture
def fake_connection():
    """MySQL connection double whose cursor returns configurable rows."""
    connection = MagicMock()
    cursor = MagicMock()
    cursor.with_rows = True
    cursor.fetchall.return_value = []
    connection.cursor.return_value = cursor
    return connection


@pytest.fixture
def fake_session_factory(fake_connection):
    """Session factory yielding ``fake_connection`` and recording its use."""
    calls = []

    @contextmanager
    def _factory(params, correlation_id=None):
        calls.append(params)
        try:
            yield fake_connection
        finally:
            fake_connection.close()

    _factory.calls = calls
    return _factory

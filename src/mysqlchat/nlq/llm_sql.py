"""LLM-based SQL generation from natural language.

This module uses the OpenAI chat completions API to translate a user
question into one candidate MySQL statement. The candidate is untrusted
and must go through ``sql_guard.sanitize_sql`` before execution.
"""

import logging

from openai import OpenAI, OpenAIError

from mysqlchat.core.config import settings
from mysqlchat.nlq.prompts import build_system_prompt

logger = logging.getLogger(__name__)

# Fixed so the same question yields the same SQL as far as the model allows
TEMPERATURE = 0


class SqlGenerationError(Exception):
    """Raised when the LLM produces no usable SQL."""

    pass


def generate_sql_candidate(
    api_key: str,
    question: str,
    schema_description: str | None = None,
    max_rows: int = 100,
    correlation_id: str | None = None,
) -> str:
    """Generate a candidate SQL statement from a natural language question.

    Args:
        api_key: OpenAI API key supplied with the request
        question: Natural language question from the user
        schema_description: Optional human-authored schema description
        max_rows: Row cap the LIMIT clause should respect
        correlation_id: Optional correlation ID for logging

    Returns:
        Raw candidate SQL text (stripped, not yet sanitized)

    Raises:
        SqlGenerationError: If the LLM is disabled, the call fails, or the
            response carries no content
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}

    logger.info(
        "Generating SQL from natural language question",
        extra={**log_extra, "question": question},
    )

    if not settings.LLM_ENABLED:
        logger.warning("LLM is disabled", extra=log_extra)
        raise SqlGenerationError("Natural language query feature is disabled")

    if not api_key or not api_key.strip():
        logger.error("OpenAI API key missing from request", extra=log_extra)
        raise SqlGenerationError("LLM API key not provided")

    messages = [
        {"role": "system", "content": build_system_prompt(schema_description, max_rows)},
        {"role": "user", "content": question},
    ]

    request_kwargs = {
        "model": settings.OPENAI_MODEL,
        "messages": messages,
        "temperature": TEMPERATURE,
    }
    if settings.OPENAI_MAX_TOKENS:
        request_kwargs["max_tokens"] = settings.OPENAI_MAX_TOKENS

    try:
        # One HTTP call per request, no SDK retries
        client = OpenAI(
            api_key=api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
        )

        logger.debug(
            "Calling OpenAI chat completions API",
            extra={**log_extra, "model": settings.OPENAI_MODEL},
        )

        response = client.chat.completions.create(**request_kwargs)

    except OpenAIError as e:
        logger.error(f"OpenAI API error: {e}", extra=log_extra)
        raise SqlGenerationError(f"LLM API call failed: {e}")

    sql_candidate = _extract_content(response)

    if not sql_candidate:
        logger.error("OpenAI response contained no SQL", extra=log_extra)
        raise SqlGenerationError("Failed to generate SQL query: No response from OpenAI")

    logger.debug(
        "OpenAI API response received",
        extra={**log_extra, "llm_response": sql_candidate},
    )

    return sql_candidate


def _extract_content(response) -> str | None:
    """Pull the first choice's message text out of a completion response."""
    choices = getattr(response, "choices", None)
    if not choices:
        return None

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not isinstance(content, str):
        return None

    return content.strip() or None

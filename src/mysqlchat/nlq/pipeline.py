"""End-to-end NLQ pipeline for the chatWithYourMysqlDb action.

question -> LLM candidate -> sanitized SQL -> MySQL rows -> response text
"""

import logging
from typing import Any, Callable, ContextManager, Protocol

from mysqlchat.models.action import ChatWithDbInput, ChatWithDbOutput, MySQLConnectionParams
from mysqlchat.nlq.formatter import format_response
from mysqlchat.nlq.llm_sql import generate_sql_candidate
from mysqlchat.nlq.mysql_engine import mysql_session, run_query
from mysqlchat.nlq.sql_guard import find_write_keywords, sanitize_sql

logger = logging.getLogger(__name__)


class SqlGenerator(Protocol):
    """Produces a raw SQL candidate for a question."""

    def __call__(
        self,
        api_key: str,
        question: str,
        schema_description: str | None = None,
        max_rows: int = 100,
        correlation_id: str | None = None,
    ) -> str: ...


SessionFactory = Callable[..., ContextManager[Any]]


def chat_with_database(
    payload: ChatWithDbInput,
    *,
    generator: SqlGenerator = generate_sql_candidate,
    session_factory: SessionFactory = mysql_session,
    correlation_id: str | None = None,
) -> ChatWithDbOutput:
    """Answer a natural language question against the caller's MySQL database.

    The SQL is generated before any database contact, so a generation
    failure never opens a session. The session is closed on every path.

    Args:
        payload: Action input record
        generator: SQL candidate generator (LLM call)
        session_factory: Context manager factory yielding a DB connection,
            called as ``session_factory(params, correlation_id=...)``
        correlation_id: Optional correlation ID for logging

    Returns:
        Action output record

    Raises:
        SqlGenerationError: If no usable SQL was generated
        DatabaseConnectionError: If the database session cannot be opened
        QueryExecutionError: If the database rejects the statement
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}
    request = payload.to_query_request()

    candidate = generator(
        api_key=payload.openai_api_key,
        question=request.question,
        schema_description=request.schema_description,
        max_rows=request.row_cap,
        correlation_id=correlation_id,
    )

    safe_sql = sanitize_sql(candidate)

    logger.info(
        "Sanitized SQL candidate",
        extra={**log_extra, "candidate": candidate, "sql": safe_sql},
    )

    write_keywords = find_write_keywords(safe_sql)
    if write_keywords:
        # Coercive guard only: execution proceeds, the database rejects or runs it
        logger.warning(
            f"Sanitized SQL contains write keywords: {', '.join(write_keywords)}",
            extra={**log_extra, "sql": safe_sql, "write_keywords": write_keywords},
        )

    params: MySQLConnectionParams = payload.to_connection_params()

    with session_factory(params, correlation_id=correlation_id) as connection:
        rows = run_query(connection, safe_sql, request.row_cap, correlation_id=correlation_id)

    return ChatWithDbOutput(response=format_response(rows, payload.instructions))

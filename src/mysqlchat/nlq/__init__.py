"""Natural Language Query (NLQ) module for MySQL.

This module translates plain-English questions into sanitized, read-only
SQL and runs them against the caller's MySQL database.
"""

from mysqlchat.nlq.formatter import format_response
from mysqlchat.nlq.llm_sql import SqlGenerationError, generate_sql_candidate
from mysqlchat.nlq.mysql_engine import (
    DatabaseConnectionError,
    QueryExecutionError,
    mysql_session,
    run_query,
)
from mysqlchat.nlq.pipeline import chat_with_database
from mysqlchat.nlq.prompts import NO_SCHEMA, build_system_prompt
from mysqlchat.nlq.sql_guard import find_write_keywords, sanitize_sql

__all__ = [
    "NO_SCHEMA",
    "build_system_prompt",
    "generate_sql_candidate",
    "SqlGenerationError",
    "sanitize_sql",
    "find_write_keywords",
    "mysql_session",
    "run_query",
    "QueryExecutionError",
    "DatabaseConnectionError",
    "format_response",
    "chat_with_database",
]

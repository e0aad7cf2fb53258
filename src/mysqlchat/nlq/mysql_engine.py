"""MySQL query execution engine for NLQ.

This module opens request-scoped MySQL sessions over TLS and executes
sanitized SQL statements, returning rows as dictionaries.
"""

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Iterator

import mysql.connector
from mysql.connector import errorcode

from mysqlchat.core.config import settings
from mysqlchat.models.action import MySQLConnectionParams

logger = logging.getLogger(__name__)

QUERY_FAILURE_GUIDANCE = (
    "Query failed. Please ensure your question uses existing table and column names. "
    "If possible, provide the database schema in the 'schema' parameter."
)


class QueryExecutionError(Exception):
    """Raised when MySQL rejects or fails to run a statement."""

    def __init__(self, message: str, database_message: str | None = None):
        super().__init__(message)
        self.database_message = database_message


class DatabaseConnectionError(Exception):
    """Raised when a MySQL session cannot be opened."""

    pass


def build_query_failure_message(database_message: str) -> str:
    """Combine the user guidance with the database's own error text."""
    return f"{QUERY_FAILURE_GUIDANCE} Error: {database_message}"


@contextmanager
def mysql_session(
    params: MySQLConnectionParams,
    correlation_id: str | None = None,
) -> Iterator[Any]:
    """Open a MySQL connection for one request and always close it.

    The CA certificate arrives as PEM text, so it is written to a
    temporary file for the duration of the TLS handshake.

    Args:
        params: Connection parameters from the request
        correlation_id: Optional correlation ID for logging

    Yields:
        An open mysql-connector connection

    Raises:
        DatabaseConnectionError: If the connection cannot be established
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}

    connection = _connect(params, log_extra)
    try:
        yield connection
    finally:
        try:
            connection.close()
            logger.debug("MySQL connection closed", extra=log_extra)
        except mysql.connector.Error as e:
            logger.warning(f"Failed to close MySQL connection cleanly: {e}", extra=log_extra)


def _connect(params: MySQLConnectionParams, log_extra: dict[str, Any]):
    """Connect to MySQL with the PEM CA written to a temporary file."""
    connect_kwargs: dict[str, Any] = {
        "host": params.host,
        "port": params.port,
        "user": params.user,
        "password": params.password,
        "database": params.database,
        "ssl_verify_cert": settings.MYSQL_SSL_VERIFY_CERT,
    }
    if settings.MYSQL_CONNECT_TIMEOUT_SECONDS:
        connect_kwargs["connection_timeout"] = settings.MYSQL_CONNECT_TIMEOUT_SECONDS

    ca_file = tempfile.NamedTemporaryFile(
        mode="w", suffix=".pem", prefix="mysql-ca-", delete=False
    )
    try:
        with ca_file:
            ca_file.write(params.ssl_ca)
        connect_kwargs["ssl_ca"] = ca_file.name

        logger.info(
            "Opening MySQL connection",
            extra={
                **log_extra,
                "host": params.host,
                "port": params.port,
                "database": params.database,
            },
        )

        connection = mysql.connector.connect(**connect_kwargs)

    except mysql.connector.Error as e:
        logger.error(
            f"MySQL connection failed: {_describe_mysql_error(e)}",
            extra={**log_extra, "error": str(e), "errno": getattr(e, "errno", None)},
        )
        raise DatabaseConnectionError(f"Database connection failed: {e}")

    finally:
        try:
            os.unlink(ca_file.name)
        except OSError:
            logger.warning("Could not remove temporary CA file", extra=log_extra)

    return connection


def run_query(
    connection,
    sql: str,
    max_rows: int,
    correlation_id: str | None = None,
) -> list[dict[str, Any]]:
    """Execute a sanitized SQL statement and return its rows.

    Args:
        connection: Open MySQL connection (see ``mysql_session``)
        sql: Sanitized SQL statement; executed verbatim
        max_rows: Row cap; extra rows are dropped
        correlation_id: Optional correlation ID for logging

    Returns:
        List of result rows as dictionaries, in database order

    Raises:
        QueryExecutionError: If MySQL rejects the statement
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}

    logger.info(
        "Executing MySQL query",
        extra={**log_extra, "sql": sql},
    )

    start_time = time.time()
    cursor = None

    try:
        cursor = connection.cursor(dictionary=True, buffered=True)
        cursor.execute(sql)
        rows = [dict(row) for row in cursor.fetchall()] if cursor.with_rows else []

    except mysql.connector.Error as e:
        execution_time = time.time() - start_time
        database_message = getattr(e, "msg", None) or str(e)

        logger.error(
            f"MySQL query failed: {_describe_mysql_error(e)}",
            extra={
                **log_extra,
                "error": str(e),
                "errno": getattr(e, "errno", None),
                "execution_time_seconds": round(execution_time, 2),
            },
        )

        raise QueryExecutionError(
            build_query_failure_message(database_message),
            database_message=database_message,
        )

    finally:
        if cursor is not None:
            cursor.close()

    execution_time = time.time() - start_time

    if len(rows) > max_rows:
        logger.warning(
            f"Query returned {len(rows)} rows, limiting to {max_rows}",
            extra=log_extra,
        )
        rows = rows[:max_rows]

    logger.info(
        f"Successfully retrieved {len(rows)} rows from MySQL",
        extra={**log_extra, "execution_time_seconds": round(execution_time, 2)},
    )

    return rows


def _describe_mysql_error(error: Exception) -> str:
    """Classify a MySQL error for log messages.

    Args:
        error: Exception from mysql-connector

    Returns:
        Short category label
    """
    errno = getattr(error, "errno", None)

    if errno in (errorcode.ER_BAD_FIELD_ERROR, errorcode.ER_NO_SUCH_TABLE, errorcode.ER_BAD_TABLE_ERROR):
        return "unknown table or column"
    if errno == errorcode.ER_PARSE_ERROR:
        return "syntax error"
    if errno in (
        errorcode.ER_ACCESS_DENIED_ERROR,
        errorcode.ER_DBACCESS_DENIED_ERROR,
        errorcode.ER_TABLEACCESS_DENIED_ERROR,
        errorcode.ER_COLUMNACCESS_DENIED_ERROR,
        errorcode.ER_SPECIFIC_ACCESS_DENIED_ERROR,
    ):
        return "permission denied"
    if errno == errorcode.ER_BAD_DB_ERROR:
        return "database does not exist"
    if errno == errorcode.ER_OPTION_PREVENTS_STATEMENT:
        return "statement blocked by server option"
    if errno in (errorcode.CR_CONN_HOST_ERROR, errorcode.CR_UNKNOWN_HOST):
        return "host unreachable"

    return "database error"

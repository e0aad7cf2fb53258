"""Plugin action API routes.

This module exposes the plugin definition and the chatWithYourMysqlDb
action, which answers natural language questions against a MySQL database.
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from mysqlchat.core.config import settings
from mysqlchat.core.logging import correlation_id_context
from mysqlchat.models.action import (
    ActionDefinition,
    ActionParameter,
    ActionRunRequest,
    ActionRunResponse,
    ChatWithDbInput,
    ChatWithDbOutput,
    PluginDefinition,
)
from mysqlchat.nlq.llm_sql import SqlGenerationError
from mysqlchat.nlq.mysql_engine import DatabaseConnectionError, QueryExecutionError
from mysqlchat.nlq.pipeline import chat_with_database

logger = logging.getLogger(__name__)

ACTION_KEY = "chatWithYourMysqlDb"

router = APIRouter(prefix="/api/v1")


def _describe_parameters(model: type[BaseModel]) -> list[ActionParameter]:
    """Derive action parameter metadata from a pydantic model's fields."""
    return [
        ActionParameter(
            key=field.alias or name,
            name=field.title or name,
            description=field.description or "",
            required=field.is_required(),
        )
        for name, field in model.model_fields.items()
    ]


def get_plugin_definition() -> PluginDefinition:
    """Build the plugin definition advertised to the plugin host."""
    action = ActionDefinition(
        key=ACTION_KEY,
        name="Chat with your MySQL DB",
        description="Users can send DB requests in natural language and receive data and/or helpful feedback.",
        type="read",
        input_parameters=_describe_parameters(ChatWithDbInput),
        output_parameters=_describe_parameters(ChatWithDbOutput),
    )
    return PluginDefinition(
        name=settings.PLUGIN_NAME,
        description=settings.PLUGIN_DESCRIPTION,
        actions=[action],
    )


@router.get("/plugin", response_model=PluginDefinition)
async def plugin_definition() -> PluginDefinition:
    """Return the plugin definition with its action metadata."""
    return get_plugin_definition()


@router.post(f"/actions/{ACTION_KEY}/run", response_model=ActionRunResponse)
def run_chat_with_database(request: ActionRunRequest) -> ActionRunResponse:
    """Run the chatWithYourMysqlDb action.

    Declared sync so the blocking LLM and MySQL calls run in the
    server's threadpool.

    Args:
        request: ActionRunRequest carrying the action input record

    Returns:
        ActionRunResponse with the response text

    Raises:
        HTTPException: 502 when the LLM or the database connection fails,
            400 when the database rejects the query, 500 for anything else
    """
    correlation_id = str(uuid4())
    token = correlation_id_context.set(correlation_id)

    logger.info(
        "Action run received",
        extra={
            "correlation_id": correlation_id,
            "action": ACTION_KEY,
            "question": request.input.question,
            "max_rows": request.input.max_rows,
        },
    )

    try:
        output = chat_with_database(request.input, correlation_id=correlation_id)

    except SqlGenerationError as e:
        logger.error(
            "SQL generation failed",
            extra={"correlation_id": correlation_id, "error": str(e)},
        )
        raise HTTPException(status_code=502, detail=str(e))

    except DatabaseConnectionError as e:
        logger.error(
            "Database connection failed",
            extra={"correlation_id": correlation_id, "error": str(e)},
        )
        raise HTTPException(status_code=502, detail=str(e))

    except QueryExecutionError as e:
        logger.error(
            "MySQL query execution failed",
            extra={"correlation_id": correlation_id, "error": str(e)},
        )
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logger.error(
            "Unexpected error in action run",
            extra={"correlation_id": correlation_id, "error": str(e)},
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {e}")

    finally:
        correlation_id_context.reset(token)

    logger.info(
        "Action run completed",
        extra={"correlation_id": correlation_id, "response_length": len(output.response)},
    )

    return ActionRunResponse(output=output)

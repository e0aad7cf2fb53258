"""Response formatting for NLQ results."""

import json
from datetime import date, datetime, time
from typing import Any

INSTRUCTIONS_PREFIX = "Instructions for the following content:"


def format_response(rows: list[dict[str, Any]], instructions: str | None = None) -> str:
    """Serialize result rows as indented JSON, optionally prefixed by instructions.

    Args:
        rows: Result rows as dictionaries
        instructions: Optional post-processing instructions from the caller

    Returns:
        Response text
    """
    response = json.dumps(rows, indent=2, default=_json_default, ensure_ascii=False)
    if instructions:
        response = f"{INSTRUCTIONS_PREFIX} {instructions}\n\n{response}"
    return response


def _json_default(value: Any) -> Any:
    """Convert MySQL column values that json cannot encode natively."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, set):
        # MySQL SET columns
        return sorted(value)
    return str(value)

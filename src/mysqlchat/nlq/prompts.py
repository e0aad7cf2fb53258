"""System prompt construction for NLQ.

The prompt constrains the LLM to read-only MySQL and interpolates the
caller's optional schema description.
"""

import logging

logger = logging.getLogger(__name__)

# Schema description value meaning "no schema supplied"
NO_SCHEMA = "[]"


def normalize_schema_description(schema_description: str | None) -> str:
    """Map missing or blank schema descriptions to the NO_SCHEMA sentinel.

    Args:
        schema_description: Human-authored schema text, possibly empty

    Returns:
        The stripped schema text, or NO_SCHEMA
    """
    if schema_description is None:
        return NO_SCHEMA
    stripped = schema_description.strip()
    return stripped or NO_SCHEMA


def build_system_prompt(schema_description: str | None, max_rows: int) -> str:
    """Build the system prompt for MySQL query generation.

    Args:
        schema_description: Optional description of tables, columns and
            relationships. None, blank and NO_SCHEMA all mean "no schema".
        max_rows: Row cap the generated LIMIT clause must respect

    Returns:
        System prompt string
    """
    schema_info = normalize_schema_description(schema_description)

    if schema_info == NO_SCHEMA:
        schema_section = ""
        join_rule = "- Do not use JOINs: no table relationships were provided"
    else:
        schema_section = f"\n## Schema information\n\n{schema_info}\n"
        join_rule = "- Include relevant JOINs only if table relationships are explicitly provided in the schema information"

    logger.debug(
        "Built system prompt",
        extra={"has_schema": schema_info != NO_SCHEMA, "max_rows": max_rows},
    )

    return f"""You are a MySQL expert. Generate secure, read-only SQL queries based on natural language questions.
{schema_section}
## Important

- Return ONLY the raw SQL query without any formatting, markdown, or code blocks
- NEVER assume column names exist
- When no schema is provided or when asked for "all fields", use "SELECT *"
- Do not invent or guess column names based on table names

## Rules

- Generate only SELECT queries (no INSERT, UPDATE, DELETE, DROP, ALTER, CREATE or any other statement that modifies data or schema)
- Generate exactly one statement
- For random selection, use "ORDER BY RAND()"
{join_rule}
- Add inline comments with -- to explain the query
- Limit results using a LIMIT clause of at most {max_rows} rows
"""

"""Deterministic sanitization of LLM-generated SQL.

``sanitize_sql`` rewrites an untrusted candidate into a single statement
that starts with SELECT and ends with one semicolon. It coerces rather
than rejects, and performs no I/O.
"""

import re

# Opening fence with an optional SQL language tag, e.g. ```sql or ```MySQL
_FENCE_OPEN = re.compile(r"```[ \t]*(?:mysql|sql)?", re.IGNORECASE)
_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_SELECT_PREFIX = re.compile(r"SELECT\b", re.IGNORECASE)

# FOR UPDATE is a locking read and REPLACE(...) is a string function
_WRITE_KEYWORDS = re.compile(
    r"\bFOR\s+UPDATE\b"
    r"|\b(INSERT|UPDATE|DELETE|REPLACE(?!\s*\()|DROP|ALTER|CREATE|TRUNCATE|RENAME|GRANT|REVOKE)\b"
    r"|\bINTO\s+(OUTFILE|DUMPFILE)\b",
    re.IGNORECASE,
)

STATEMENT_TERMINATOR = ";"


def sanitize_sql(candidate: str) -> str:
    """Turn a raw LLM candidate into a safe single SELECT statement.

    Steps, in order:
      1. strip code fences (```sql, ```mysql, ```)
      2. strip ``--`` comments to end of line
      3. drop blank lines
      4. prepend ``SELECT `` when the text does not start with SELECT
      5. cut everything from the first ``;``
      6. terminate with exactly one ``;``

    The result is idempotent under a second pass. Keywords after the
    SELECT prefix are not inspected; see ``find_write_keywords``.

    Args:
        candidate: Untrusted SQL text from the LLM

    Returns:
        Sanitized SQL statement
    """
    text = _FENCE_OPEN.sub("", candidate)
    text = _LINE_COMMENT.sub("", text)

    lines = [line.rstrip() for line in text.splitlines()]
    text = "\n".join(line for line in lines if line.strip()).strip()

    if not _SELECT_PREFIX.match(text):
        text = f"SELECT {text}"

    text = text.split(STATEMENT_TERMINATOR, 1)[0].rstrip()

    return f"{text}{STATEMENT_TERMINATOR}".strip()


def find_write_keywords(sql: str) -> list[str]:
    """List write/DDL keywords present in a statement, upper-cased, in order.

    Matches inside string literals and identifiers count too; this is a
    coarse signal for logging, not a parser.
    """
    found: list[str] = []
    for match in _WRITE_KEYWORDS.finditer(sql):
        keyword = " ".join(match.group(0).upper().split())
        if keyword == "FOR UPDATE":
            continue
        if keyword not in found:
            found.append(keyword)
    return found

"""Identifier and literal escaping.

Every table, column and index name interpolated into a generated statement
goes through ``quote_identifier``. Values never do: row values are bound as
parameters by the caller, and DEFAULT literals are rendered by codecs using
``quote_literal``.
"""

from __future__ import annotations

import re

from row_schema.core.exceptions import IdentifierError

_BARE_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# https://www.sqlite.org/lang_keywords.html
SQLITE_KEYWORDS: frozenset[str] = frozenset(
    """
    ABORT ACTION ADD AFTER ALL ALTER ALWAYS ANALYZE AND AS ASC ATTACH AUTOINCREMENT
    BEFORE BEGIN BETWEEN BY CASCADE CASE CAST CHECK COLLATE COLUMN COMMIT CONFLICT
    CONSTRAINT CREATE CROSS CURRENT CURRENT_DATE CURRENT_TIME CURRENT_TIMESTAMP
    DATABASE DEFAULT DEFERRABLE DEFERRED DELETE DESC DETACH DISTINCT DO DROP EACH
    ELSE END ESCAPE EXCEPT EXCLUDE EXCLUSIVE EXISTS EXPLAIN FAIL FILTER FIRST
    FOLLOWING FOR FOREIGN FROM FULL GENERATED GLOB GROUP GROUPS HAVING IF IGNORE
    IMMEDIATE IN INDEX INDEXED INITIALLY INNER INSERT INSTEAD INTERSECT INTO IS
    ISNULL JOIN KEY LAST LEFT LIKE LIMIT MATCH MATERIALIZED NATURAL NO NOT NOTHING
    NOTNULL NULL NULLS OF OFFSET ON OR ORDER OTHERS OUTER OVER PARTITION PLAN
    PRAGMA PRECEDING PRIMARY QUERY RAISE RANGE RECURSIVE REFERENCES REGEXP REINDEX
    RELEASE RENAME REPLACE RESTRICT RETURNING RIGHT ROLLBACK ROW ROWS SAVEPOINT
    SELECT SET TABLE TEMP TEMPORARY THEN TIES TO TRANSACTION TRIGGER UNBOUNDED
    UNION UNIQUE UPDATE USING VACUUM VALUES VIEW VIRTUAL WHEN WHERE WINDOW WITH
    WITHOUT
    """.split()
)


def quote_identifier(name: str) -> str:
    """Return *name* ready for interpolation as a SQL identifier.

    Plain names that are not keywords are returned unchanged; anything else
    is double-quoted with embedded quotes doubled.

    Raises:
        IdentifierError: If *name* is empty or contains a NUL character.
    """
    if not isinstance(name, str) or not name:
        raise IdentifierError(str(name), "identifier must be a non-empty string")
    if "\x00" in name:
        raise IdentifierError(name, "identifier contains a NUL character")
    if _BARE_IDENTIFIER.match(name) and name.upper() not in SQLITE_KEYWORDS:
        return name
    return '"' + name.replace('"', '""') + '"'


def quote_literal(text: str) -> str:
    """Return *text* as a single-quoted SQL string literal."""
    return "'" + text.replace("'", "''") + "'"

"""SQL identifier validation for job-supplied schema/table/column names."""

from __future__ import annotations

import re
from typing import Iterable

from sqlalchemy.dialects import postgresql

from core.exceptions import InvalidIdentifierError

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PREPARER = postgresql.dialect().identifier_preparer


def quote_identifier(name: str, *, field: str, allow_qualified: bool = False) -> str:
    """Validate ``name`` and return it quoted for PostgreSQL.

    ``allow_qualified`` permits a single ``schema.name`` qualification, used
    for content functions living outside the search path.
    """

    parts = name.split(".") if allow_qualified else [name]
    if len(parts) > 2 or not all(_IDENTIFIER_PATTERN.match(part) for part in parts):
        raise InvalidIdentifierError(f"Invalid SQL identifier for {field}: {name!r}", field=field)
    return ".".join(_PREPARER.quote_identifier(part) for part in parts)


class TableAllowList:
    """Optional allow-list of ``schema.table`` pairs jobs may reference.

    Entries match exactly; quoted identifiers are case sensitive in Postgres.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries = frozenset(entry.strip() for entry in entries if entry.strip())

    def check(self, schema: str, table: str) -> None:
        if self._entries and f"{schema}.{table}" not in self._entries:
            raise InvalidIdentifierError(f"Table {schema}.{table} is not allowed for embedding jobs", field="table")


__all__ = ["quote_identifier", "TableAllowList"]

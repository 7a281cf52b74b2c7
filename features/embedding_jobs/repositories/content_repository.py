"""Repository reading job content and writing embeddings back to rows."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from config.embedding_jobs import ALLOWED_TABLES
from infrastructure.db import session_scope

from .identifiers import TableAllowList, quote_identifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ContentRow:
    id: Any
    content: Any


class ContentRepository:
    """Reads content through a row's content function and stores vectors.

    Integer row ids bind natively so the primary key index is used. String
    ids are compared as text so that text and uuid keys bind the same way.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        *,
        allowed_tables: Iterable[str] = ALLOWED_TABLES,
    ) -> None:
        self.session_factory = session_factory
        self.allow_list = TableAllowList(allowed_tables)

    @staticmethod
    def _row_filter(column: str, row_id: int | str) -> tuple[str, int | str]:
        if isinstance(row_id, int):
            return f"{column} = :row_id", row_id
        return f"{column}::text = :row_id", str(row_id)

    def _table_ref(self, schema: str, table: str) -> str:
        self.allow_list.check(schema, table)
        return f"{quote_identifier(schema, field='schema')}.{quote_identifier(table, field='table')}"

    async def fetch_content(
        self,
        schema: str,
        table: str,
        content_function: str,
        row_id: int | str,
    ) -> ContentRow | None:
        table_ref = self._table_ref(schema, table)
        function_ref = quote_identifier(content_function, field="contentFunction", allow_qualified=True)
        row_filter, row_param = self._row_filter("t.id", row_id)
        stmt = text(
            f"SELECT t.id AS id, {function_ref}(t) AS content "
            f"FROM {table_ref} AS t WHERE {row_filter}"
        )

        async with session_scope(self.session_factory) as session:
            result = await session.execute(stmt, {"row_id": row_param})
            row = result.mappings().first()

        if row is None:
            return None
        return ContentRow(id=row["id"], content=row["content"])

    async def update_vector(
        self,
        schema: str,
        table: str,
        embedding_column: str,
        row_id: int | str,
        vector: Sequence[float],
    ) -> int:
        """Store ``vector`` on the row and return the number of rows affected."""

        table_ref = self._table_ref(schema, table)
        column_ref = quote_identifier(embedding_column, field="embeddingColumn")
        row_filter, row_param = self._row_filter("id", row_id)
        stmt = text(
            f"UPDATE {table_ref} SET {column_ref} = CAST(:embedding AS vector) "
            f"WHERE {row_filter}"
        )

        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                stmt,
                {"embedding": json.dumps(list(vector)), "row_id": row_param},
            )
            affected = result.rowcount or 0

        logger.debug(
            "Stored embedding",
            extra={"table": f"{schema}.{table}", "row_id": row_id, "affected": affected},
        )
        return affected


__all__ = ["ContentRepository", "ContentRow"]

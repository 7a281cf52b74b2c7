"""Repository acknowledging processed jobs on the pgmq queue."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from config.embedding_jobs import QUEUE_NAME
from infrastructure.db import session_scope

logger = logging.getLogger(__name__)

_DELETE_STMT = text("SELECT pgmq.delete(CAST(:queue_name AS text), CAST(:msg_id AS bigint))")


class QueueRepository:
    """Only deletion is needed; enqueue and visibility are handled by the database."""

    def __init__(self, session_factory: async_sessionmaker, *, queue_name: str = QUEUE_NAME) -> None:
        self.session_factory = session_factory
        self.queue_name = queue_name

    async def delete(self, job_id: int) -> int:
        """Delete a message and return how many were removed (0 or 1)."""

        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                _DELETE_STMT, {"queue_name": self.queue_name, "msg_id": job_id}
            )
            deleted = bool(result.scalar())

        if deleted:
            logger.info("Job deleted from queue", extra={"job_id": job_id, "queue": self.queue_name})
        return 1 if deleted else 0


__all__ = ["QueueRepository"]

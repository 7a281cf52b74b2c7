"""Poll a batch job until it reaches a terminal status."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from config.embedding_jobs import POLL_INTERVAL_SECONDS
from core.exceptions import BatchPollingError, BatchStageError, BatchWaitTimeoutError
from core.providers.batch import BatchJobState

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class BatchStatusProvider(Protocol):
    async def get_batch(self, batch_id: str) -> BatchJobState: ...


class BatchWaiter:
    """Blocks until the remote batch is terminal.

    There is no built-in poll limit. Callers bound the wait with
    ``deadline_seconds`` or by setting ``cancel_event``; both surface as
    ``BatchWaitTimeoutError``. A failing status request surfaces as
    ``BatchPollingError``.
    """

    def __init__(
        self,
        provider: BatchStatusProvider,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self.provider = provider
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    async def wait(
        self,
        batch: BatchJobState,
        *,
        deadline_seconds: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchJobState:
        if batch.is_terminal:
            return batch

        logger.info(
            "Polling batch job status",
            extra={"batch_id": batch.id, "poll_interval": self.poll_interval, "deadline_seconds": deadline_seconds},
        )
        started = self._clock()
        iteration = 0
        state = batch

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Batch wait cancelled", extra={"batch_id": batch.id, "iteration": iteration})
                raise BatchWaitTimeoutError(f"Batch job {batch.id} wait cancelled before completion")

            iteration += 1
            try:
                state = await self.provider.get_batch(batch.id)
            except BatchStageError:
                raise
            except Exception as exc:
                raise BatchPollingError(f"Failed while polling batch job: {exc}", original_error=exc) from exc
            elapsed = self._clock() - started
            logger.info(
                "Batch polling iteration",
                extra={
                    "batch_id": batch.id,
                    "iteration": iteration,
                    "status": state.status,
                    "elapsed_seconds": int(elapsed),
                },
            )

            if state.is_terminal:
                return state

            if deadline_seconds and elapsed >= deadline_seconds:
                logger.error(
                    "Batch polling deadline reached",
                    extra={"batch_id": batch.id, "deadline_seconds": deadline_seconds, "status": state.status},
                )
                raise BatchWaitTimeoutError(
                    f"Timed out after {deadline_seconds:g}s waiting for batch job {batch.id} (last status: {state.status})"
                )

            await self._sleep(self.poll_interval)


__all__ = ["BatchWaiter", "BatchStatusProvider"]

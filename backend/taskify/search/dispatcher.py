from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from taskify.search.engine import SearchOutcome, UnifiedSearchEngine

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3

OutcomeCallback = Callable[[int, SearchOutcome], Awaitable[None]]


class SearchDispatcher:
    """
    Turns a stream of keystroke-level queries into searches.

    `submit` restarts a quiet-period timer, so only the query present when
    input settles is dispatched. Every dispatch takes the next sequence
    token; an outcome is delivered only while its token is the latest one,
    so a slow earlier search can never overwrite a faster later one.
    """

    def __init__(
        self,
        engine: UnifiedSearchEngine,
        on_outcome: OutcomeCallback,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.engine = engine
        self.on_outcome = on_outcome
        self.delay = delay
        self.sequence = 0
        self.dispatched = 0
        self.dropped = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    def submit(self, query: str) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._debounced(query))

    async def _debounced(self, query: str) -> None:
        await asyncio.sleep(self.delay)
        self.dispatch(query)

    def dispatch(self, query: str) -> asyncio.Task:
        """Start a search right away, bypassing the quiet period."""
        self.sequence += 1
        self.dispatched += 1
        token = self.sequence
        logger.debug("Dispatching search #%d for %r", token, query)
        task = asyncio.get_running_loop().create_task(self._run(token, query))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run(self, token: int, query: str) -> None:
        outcome = await self.engine.execute(query)
        if token != self.sequence:
            self.dropped += 1
            logger.debug("Dropping stale search #%d (latest is #%d)", token, self.sequence)
            return
        await self.on_outcome(token, outcome)

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no search is in flight."""
        while True:
            pending = list(self._inflight)
            if self._timer is not None and not self._timer.done():
                pending.append(self._timer)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        pending = list(self._inflight)
        if self._timer is not None:
            pending.append(self._timer)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._timer = None

"""
Suggestion Refresher - Debounced, cancellable suggestion runs.

Typing produces a stream of contexts; only the last one after a quiet
period should reach the engine. Each submit() replaces the pending task:

    submit(c1) ──sleep──╳ cancelled
    submit(c2) ──sleep──╳ cancelled
    submit(c3) ──sleep(500ms)──▶ engine(c3) ──▶ on_result(result)

A superseded task is cancelled whether it is still sleeping or already
waiting on the engine, so its result is never delivered.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from optigence.ai.suggestions.engine import LiveSuggestionEngine
from optigence.ai.suggestions.schemas import SuggestionContext, SuggestionPipelineResult
from optigence.core.config import settings

logger = logging.getLogger("optigence.ai.suggestions.debounce")

ResultCallback = Callable[[SuggestionPipelineResult], Awaitable[None]]


class SuggestionRefresher:
    """
    Usage:
        refresher = SuggestionRefresher(engine, on_result=push_to_client)
        refresher.submit(context)     # on every keystroke
        ...
        await refresher.close()       # on teardown
    """

    def __init__(
        self,
        engine: LiveSuggestionEngine,
        on_result: Optional[ResultCallback] = None,
        quiet_period_ms: Optional[int] = None,
    ):
        self.engine = engine
        self.on_result = on_result
        self.quiet_period = (
            quiet_period_ms if quiet_period_ms is not None else settings.SUGGESTION_DEBOUNCE_MS
        ) / 1000
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, context: SuggestionContext) -> asyncio.Task:
        """Schedule a run for this context, cancelling any pending one."""
        if self._closed:
            raise RuntimeError("SuggestionRefresher is closed")
        self.cancel()
        self._task = asyncio.create_task(self._run(context))
        return self._task

    def cancel(self) -> None:
        """Abort the current task, sleeping or in flight."""
        if self.pending:
            self._task.cancel()

    async def close(self) -> None:
        self._closed = True
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _run(self, context: SuggestionContext) -> SuggestionPipelineResult:
        await asyncio.sleep(self.quiet_period)
        result = await self.engine.generate_suggestions(context)
        if self.on_result is not None:
            await self.on_result(result)
        return result

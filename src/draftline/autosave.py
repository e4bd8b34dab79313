"""Debounced autosave for an editing session.

Every content change re-arms a single timer (debounce, not throttle), so a
user who keeps typing is never interrupted by a save until they pause for
``delay`` seconds.  Persists for one document never overlap: a timer that
fires while a persist is in flight is deferred until that persist resolves.
Background failures are logged and recorded, never raised; an explicit
``save_now`` propagates its failure to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from draftline.errors import ErrorReport

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_DELAY = 30.0

PersistFn = Callable[[], Awaitable[Any]]


class AutosaveCoordinator:
    """Schedules persists of the current document state.

    Must be used from within a running event loop.

    Args:
        persist: Coroutine function that writes the current state to the
            record store and returns the stored result.
        delay: Quiet period, in seconds, before a background save fires.
        enabled: When False, changes never arm the timer (explicit saves
            still work).
        report: Optional report that collects background failures.
        label: Name used in log lines (e.g. the document id).
    """

    def __init__(
        self,
        persist: PersistFn,
        *,
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        enabled: bool = True,
        report: ErrorReport | None = None,
        label: str = "document",
    ) -> None:
        self._persist = persist
        self.delay = delay
        self.enabled = enabled
        self.report = report
        self.label = label
        self.last_saved_at: datetime | None = None
        self._timer: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self._deferred = False
        self._closed = False
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> bool:
        """True while a debounce timer is armed."""
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    @property
    def closed(self) -> bool:
        return self._closed

    def notify_change(self) -> None:
        """Re-arm the debounce timer after a content mutation."""
        if self._closed or not self.enabled:
            return
        self._cancel_timer()
        # A fresh timer replaces any save deferred behind the in-flight one.
        self._deferred = False
        self._timer = self._spawn(self._run_timer())
        logger.debug("Autosave armed for %s (%.1fs)", self.label, self.delay)

    async def save_now(self, persist: PersistFn | None = None) -> Any:
        """Persist immediately, bypassing the debounce.

        Args:
            persist: Optional one-off persist call (e.g. a publish that also
                changes status); it is serialized with background saves.

        Returns:
            The persist result, or None if the session closed meanwhile.

        Raises:
            Exception: Whatever the persist call raised.
        """
        self._cancel_timer()
        return await self._persist_serialized(persist)

    def close(self) -> None:
        """Cancel any pending timer; an in-flight persist's result is discarded."""
        self._closed = True
        self._deferred = False
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait until no timer, deferred save, or persist is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Internals ────────────────────────────────────────────────

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task[Any]:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _run_timer(self) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        await self._fire()

    async def _fire(self) -> None:
        if self._closed:
            return
        if self._lock.locked():
            self._deferred = True
            logger.debug("Autosave for %s deferred until in-flight save resolves", self.label)
            return
        try:
            await self._persist_serialized()
        except Exception as exc:
            logger.warning("Autosave failed for %s", self.label, exc_info=True)
            if self.report:
                self.report.add_error(
                    "autosave",
                    str(exc),
                    source=self.label,
                    error_type="persist_error",
                )

    async def _persist_serialized(self, persist: PersistFn | None = None) -> Any:
        try:
            async with self._lock:
                result = await (persist or self._persist)()
                if self._closed:
                    logger.debug("Discarding save result for closed session %s", self.label)
                    return None
                if result is not None:
                    self.last_saved_at = datetime.now(tz=UTC)
                    logger.info("Saved %s", self.label)
                return result
        finally:
            if self._deferred and not self._closed and not self.pending:
                self._deferred = False
                self._spawn(self._fire())

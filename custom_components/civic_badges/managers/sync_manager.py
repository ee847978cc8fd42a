"""Sync Manager - Periodic reconciliation of the ledger with the report oracle.

ARCHITECTURE:
- SyncScheduler = STATEFUL poll loop (timer, in-flight task, display count)
- ReportCountOracle = authoritative count source (network)
- BadgeLedger / UnlockNotifier = what a successful poll is applied to

Poll lifecycle:
1. Fetch the authoritative count from the oracle
2. Drop the result if the scheduler was stopped meanwhile (generation changed)
3. On failure, record the error and skip; the ledger is left untouched
4. On success, reconcile the ledger, dispatch a possible unlock, cache the count

At most one poll is in flight. A timer tick that fires while a poll is still
running is skipped; an explicit refresh joins the running poll instead of
starting a second one. Once stopped, refreshes are discarded without fetching
until the scheduler is started again.

Observable state changes are emitted on the SIGNAL_SUFFIX_SYNC_UPDATED
dispatcher signal.
"""

from __future__ import annotations

import asyncio
import contextlib
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval

from .. import const
from ..utils.dt_utils import dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..oracle import ReportCountOracle
    from ..store import BaseBadgeStore
    from .ledger_manager import BadgeLedger
    from .notification_manager import UnlockNotifier


class SyncOutcome(StrEnum):
    """Result of one poll."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"
    DISCARDED = "discarded"


class SyncScheduler(BaseManager):
    """Drives reconciliation from the oracle on a fixed interval."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry_id: str,
        ledger: BadgeLedger,
        notifier: UnlockNotifier,
        oracle: ReportCountOracle,
        store: BaseBadgeStore,
        poll_interval: int = const.DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the scheduler.

        Args:
            hass: Home Assistant core object (timer, task tracking, dispatcher)
            entry_id: Config entry the scheduler belongs to
            ledger: Ledger reconciled on each successful poll
            notifier: Notifier fed with each reconcile result
            oracle: Source of the authoritative report count
            store: Persistence port holding the display_count value
            poll_interval: Seconds between polls
        """
        super().__init__(hass, entry_id)
        self._ledger = ledger
        self._notifier = notifier
        self._oracle = oracle
        self._store = store
        self._interval = timedelta(seconds=poll_interval)

        self._unsub_timer: Callable[[], None] | None = None
        self._task: asyncio.Task[SyncOutcome] | None = None
        self._generation = 0
        self._applying = False
        self._stopped = False

        self._display_count: int | None = None
        self._last_sync_success: bool | None = None
        self._last_error: str | None = None
        self._last_synced_at: datetime | None = None

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------

    @property
    def display_count(self) -> int | None:
        """Return the report count to display (may be optimistic)."""
        return self._display_count

    @property
    def last_sync_success(self) -> bool | None:
        """Return the result of the last completed poll, None before the first."""
        return self._last_sync_success

    @property
    def last_error(self) -> str | None:
        """Return the error message of the last failed poll."""
        return self._last_error

    @property
    def last_synced_at(self) -> datetime | None:
        """Return when the last successful poll was applied."""
        return self._last_synced_at

    @property
    def poll_interval(self) -> timedelta:
        """Return the poll interval."""
        return self._interval

    @property
    def is_running(self) -> bool:
        """Return True between async_start() and async_stop()."""
        return self._unsub_timer is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def async_setup(self) -> None:
        """Load the cached display count from storage."""
        stored = self._store.get(const.DATA_DISPLAY_COUNT)
        if isinstance(stored, int) and not isinstance(stored, bool) and stored >= 0:
            self._display_count = stored
        else:
            self._display_count = None

    async def async_start(self) -> None:
        """Start polling: one poll right away, then one per interval."""
        if self.is_running:
            return
        self._stopped = False
        self._unsub_timer = async_track_time_interval(
            self.hass,
            self._async_handle_tick,
            self._interval,
            cancel_on_shutdown=True,
        )
        const.LOGGER.debug(
            "DEBUG: Report sync started, interval %s", self._interval
        )
        self._start_poll()

    async def async_stop(self) -> None:
        """Stop polling; a poll still fetching is cancelled and its result dropped.

        A poll that is already applying its result to the ledger is allowed
        to finish so the ledger is never left half-written.
        """
        self._stopped = True
        self._generation += 1
        if self._unsub_timer is not None:
            self._unsub_timer()
            self._unsub_timer = None

        task = self._task
        if task is not None and not task.done():
            if not self._applying:
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        const.LOGGER.debug("DEBUG: Report sync stopped")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def async_refresh(self) -> SyncOutcome:
        """Poll now, or join the poll already in flight.

        Returns DISCARDED without fetching once the scheduler has been stopped.
        """
        if self._stopped:
            const.LOGGER.debug("DEBUG: Report sync stopped; refresh discarded")
            return SyncOutcome.DISCARDED

        task = self._task
        if task is None or task.done():
            task = self._start_poll()
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                return SyncOutcome.DISCARDED
            raise

    async def async_record_submission(self, delta: int = 1) -> int:
        """Optimistically bump the display count after a local submission.

        Only the displayed count changes. Badges are awarded or removed solely
        from the authoritative count of the next poll.

        Raises:
            ValueError: if delta is not a positive integer
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta < 1:
            raise ValueError(f"delta must be a positive integer, got {delta!r}")

        self._display_count = (self._display_count or 0) + delta
        await self._store.async_set(const.DATA_DISPLAY_COUNT, self._display_count)
        const.LOGGER.debug(
            "DEBUG: Display count bumped by %s to %s", delta, self._display_count
        )
        self._async_emit_update()
        return self._display_count

    async def async_reset(self) -> None:
        """Clear ledger, unlock pointer and display count for this identity."""
        await self._ledger.async_reset()
        await self._notifier.async_setup()
        self._display_count = None
        self._last_synced_at = None
        self._async_emit_update()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @callback
    def _async_handle_tick(self, _now: datetime) -> SyncOutcome | None:
        """Start a poll unless one is still in flight."""
        if self._task is not None and not self._task.done():
            const.LOGGER.debug(
                "DEBUG: Previous report sync still running; skipping this tick"
            )
            return SyncOutcome.SKIPPED
        self._start_poll()
        return None

    def _start_poll(self) -> asyncio.Task[SyncOutcome]:
        task = self.hass.async_create_task(
            self._async_poll(self._generation), f"{const.DOMAIN} report sync"
        )
        self._task = task
        return task

    async def _async_poll(self, generation: int) -> SyncOutcome:
        """Run one fetch-then-apply cycle."""
        result = await self._oracle.async_fetch_count()

        if generation != self._generation:
            const.LOGGER.debug(
                "DEBUG: Report sync stopped while fetching; discarding result"
            )
            return SyncOutcome.DISCARDED

        if not result.ok:
            self._last_sync_success = False
            self._last_error = str(result.error)
            self._async_emit_update()
            return SyncOutcome.FAILED

        count = result.count
        assert count is not None
        self._applying = True
        try:
            reconcile_result = await self._ledger.async_reconcile(count)
            await self._notifier.async_process(reconcile_result)

            self._last_sync_success = True
            self._last_error = None
            self._last_synced_at = dt_now_utc()
            if count != self._display_count:
                self._display_count = count
                await self._store.async_set(const.DATA_DISPLAY_COUNT, count)
        finally:
            self._applying = False

        self._async_emit_update()
        return SyncOutcome.APPLIED

    @callback
    def _async_emit_update(self) -> None:
        self.emit(
            const.SIGNAL_SUFFIX_SYNC_UPDATED,
            display_count=self._display_count,
            last_sync_success=self._last_sync_success,
        )

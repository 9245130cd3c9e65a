from __future__ import annotations

import asyncio
import logging
import time
from typing import Literal, Protocol

from crypto_panel.engine.fetcher import PriceFetcher
from crypto_panel.panel import Panel
from crypto_panel.store import SettingsStore
from crypto_panel.validation import configured_symbols

logger = logging.getLogger("crypto_panel.scheduler")

_MIN_STALENESS_SECONDS = 5 * 60

SchedulerState = Literal["idle", "armed"]


class Notifier(Protocol):
    async def send(self, text: str) -> None: ...


class RefreshScheduler:
    """
    Recurring refresh timer for one panel.

    Ticks are wall-clock driven: each tick starts a fetch-and-render cycle in
    its own task and re-arms with the current refresh interval. At most one
    cycle runs at a time. A tick or display trigger that lands while a cycle
    is in flight is skipped; forced triggers that land meanwhile are folded
    into a single follow-up cycle that starts once the running one ends, so
    it reads the settings saved in between.

    Display triggers (`trigger()`) honour the staleness guard. Scheduled ticks
    and forced triggers (the Refresh command, settings changes) do not.
    """

    def __init__(
        self,
        *,
        store: SettingsStore,
        fetcher: PriceFetcher,
        panel: Panel,
        notifier: Notifier,
        min_staleness_seconds: float = _MIN_STALENESS_SECONDS,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._panel = panel
        self._notifier = notifier
        self._min_staleness_seconds = float(max(0.0, min_staleness_seconds))
        self._timer: asyncio.Task[None] | None = None
        self._cycle: asyncio.Task[bool] | None = None
        self._armed_interval_s: int | None = None
        self._pending_refresh = False
        self._last_fetch_s = 0.0

    @property
    def state(self) -> SchedulerState:
        if self._timer is None or self._timer.done():
            return "idle"
        return "armed"

    @property
    def armed_interval_s(self) -> int | None:
        return self._armed_interval_s if self.state == "armed" else None

    @property
    def last_fetch_s(self) -> float:
        return self._last_fetch_s

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    def arm(self) -> None:
        if self.state == "armed":
            return
        interval_s = self._store.settings.refresh_interval
        self._armed_interval_s = interval_s
        self._timer = asyncio.create_task(self._run_timer(interval_s))
        logger.info("scheduler_armed", extra={"interval_s": interval_s})

    def teardown(self) -> None:
        if self._timer is None:
            return
        # An in-flight cycle is left to finish; only future ticks are dropped.
        self._timer.cancel()
        self._timer = None
        self._armed_interval_s = None
        logger.info("scheduler_torn_down")

    async def restart(self, *, refresh: bool = False) -> bool:
        self.teardown()
        self.arm()
        if not refresh:
            return False
        return await self.trigger(force=True)

    async def trigger(self, *, force: bool = False) -> bool:
        if not force and self._is_fresh():
            logger.info("fetch_skipped_fresh")
            return False
        cycle = self._start_cycle(force=force)
        if cycle is None:
            return False
        # The caller going away must not abort the fetch.
        return await asyncio.shield(cycle)

    async def run_cycle(self) -> bool:
        settings = self._store.settings
        if not settings.api_key.strip():
            logger.warning("cycle_skipped_no_api_key")
            return False

        quotes = await self._fetcher.fetch_all(
            configured_symbols(settings.symbols),
            api_key=settings.api_key,
        )
        if quotes is None:
            return False
        self._last_fetch_s = time.time()

        # Settings may have changed while the requests were in flight.
        current = self._store.settings
        wanted = set(configured_symbols(current.symbols))
        shown = [q for q in quotes if q.symbol in wanted]
        self._panel.show(shown, universe=current.available_symbols)

        try:
            await self._notifier.send("Crypto data refreshed")
        except Exception:
            logger.exception("refresh_notice_failed")
        return True

    async def aclose(self) -> None:
        self.teardown()
        if self._cycle is not None and not self._cycle.done():
            await self._cycle

    def _is_fresh(self) -> bool:
        if self._last_fetch_s <= 0:
            return False
        return time.time() - self._last_fetch_s < self._min_staleness_seconds

    def _start_cycle(self, *, force: bool = False) -> asyncio.Task[bool] | None:
        if self.cycle_in_progress:
            if force:
                self._pending_refresh = True
                logger.info("refresh_queued_behind_cycle")
                return self._cycle
            logger.info("tick_skipped_cycle_in_progress")
            return None
        self._cycle = asyncio.create_task(self._guarded_cycle())
        return self._cycle

    async def _guarded_cycle(self) -> bool:
        while True:
            self._pending_refresh = False
            try:
                result = await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("cycle_failed")
                result = False
            if not self._pending_refresh:
                return result

    async def _run_timer(self, interval_s: int) -> None:
        while True:
            await asyncio.sleep(interval_s)
            self._start_cycle()
            # Pick up interval changes made since the last arm.
            interval_s = self._store.settings.refresh_interval
            self._armed_interval_s = interval_s

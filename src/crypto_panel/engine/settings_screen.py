from __future__ import annotations

import logging

from crypto_panel.api import FetchFailed
from crypto_panel.engine.fetcher import PriceFetcher
from crypto_panel.engine.scheduler import Notifier, RefreshScheduler
from crypto_panel.store import SettingsStore
from crypto_panel.types import SYMBOL_SLOTS, Validity
from crypto_panel.validation import apply_symbol_input, classify

logger = logging.getLogger("crypto_panel.settings_screen")

SYMBOLS_FETCHED_NOTICE = "Successfully fetched symbols"
SYMBOLS_FAILED_NOTICE = "Failed to fetch symbols. Check your API key and internet connection."


class SettingsScreen:
    """Edits coming from the settings form: each one is saved before the refresh it triggers."""

    def __init__(
        self,
        *,
        store: SettingsStore,
        fetcher: PriceFetcher,
        scheduler: RefreshScheduler,
        notifier: Notifier,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._scheduler = scheduler
        self._notifier = notifier

    async def set_api_key(self, value: str) -> None:
        changed = await self._store.update(api_key=value.strip())
        if changed:
            await self._restart(refresh=True)
        if self._store.settings.api_key:
            await self.fetch_symbols()

    async def set_refresh_interval(self, minutes_text: str) -> bool:
        try:
            minutes = int(minutes_text.strip())
        except ValueError:
            logger.info("refresh_interval_ignored")
            return False
        if minutes < 1:
            logger.info("refresh_interval_ignored")
            return False

        if await self._store.update(refresh_interval=minutes * 60):
            logger.info("refresh_interval_changed", extra={"interval_s": minutes * 60})
            await self._restart(refresh=False)
        return True

    async def set_symbol_input(self, index: int, text: str) -> Validity:
        settings = self._store.settings
        symbols, validity = apply_symbol_input(
            settings.symbols,
            index=index,
            candidate=text,
            universe=settings.available_symbols,
        )
        if validity is Validity.INVALID:
            logger.info("symbol_rejected", extra={"slot": index, "symbol": text.strip()})
            return validity
        if await self._store.update(symbols=symbols):
            logger.info("symbols_changed", extra={"slot": index, "count": len(symbols)})
            await self._restart(refresh=True)
        return validity

    async def fetch_symbols(self) -> bool:
        try:
            universe = await self._fetcher.fetch_universe(api_key=self._store.settings.api_key)
        except FetchFailed:
            logger.exception("universe_fetch_failed")
            await self._notifier.send(SYMBOLS_FAILED_NOTICE)
            return False

        await self._store.update(available_symbols=universe)
        await self._notifier.send(SYMBOLS_FETCHED_NOTICE)
        return True

    def symbol_inputs(self) -> list[tuple[str, Validity]]:
        settings = self._store.settings
        inputs: list[tuple[str, Validity]] = []
        for i in range(SYMBOL_SLOTS):
            text = settings.symbols[i] if i < len(settings.symbols) else ""
            inputs.append((text, classify(text, settings.available_symbols)))
        return inputs

    async def _restart(self, *, refresh: bool) -> None:
        # A closed panel keeps its timer idle; the next open picks up the change.
        if self._scheduler.state != "armed":
            return
        await self._scheduler.restart(refresh=refresh)

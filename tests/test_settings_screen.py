import asyncio
from typing import Any

import httpx

from crypto_panel.api import CryptoPriceClient
from crypto_panel.engine.fetcher import PriceFetcher
from crypto_panel.engine.scheduler import RefreshScheduler
from crypto_panel.engine.settings_screen import (
    SYMBOLS_FAILED_NOTICE,
    SYMBOLS_FETCHED_NOTICE,
    SettingsScreen,
)
from crypto_panel.notifications import ToastNotifier
from crypto_panel.panel import Panel
from crypto_panel.persistence import MemoryDocumentStore
from crypto_panel.rendering import HtmlPanelRenderer
from crypto_panel.store import SettingsStore
from crypto_panel.types import Validity


class _SpyScheduler(RefreshScheduler):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.restarts: list[bool] = []
        self.saves_at_restart: list[int] = []
        self.backend: MemoryDocumentStore | None = None

    async def restart(self, *, refresh: bool = False) -> bool:
        self.restarts.append(refresh)
        if self.backend is not None:
            self.saves_at_restart.append(self.backend.saves)
        return False


def _build(handler: Any, document: dict[str, Any]):
    backend = MemoryDocumentStore(document)
    store = SettingsStore(backend=backend)
    client = CryptoPriceClient(transport=httpx.MockTransport(handler))
    fetcher = PriceFetcher(client=client)
    notifier = ToastNotifier()
    scheduler = _SpyScheduler(
        store=store,
        fetcher=fetcher,
        panel=Panel(renderer=HtmlPanelRenderer()),
        notifier=notifier,
    )
    scheduler.backend = backend
    screen = SettingsScreen(store=store, fetcher=fetcher, scheduler=scheduler, notifier=notifier)
    return backend, store, client, notifier, scheduler, screen


def _no_requests(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request: {request.url}")


def test_symbol_inputs_follow_validity_rules() -> None:
    backend, store, client, _, _, screen = _build(
        _no_requests,
        {"apiKey": "k", "symbols": ["doge", "eth"], "availableSymbols": ["BTC"]},
    )

    async def _run() -> tuple[Validity, Validity]:
        try:
            await store.load()
            first = await screen.set_symbol_input(0, "btc")
            second = await screen.set_symbol_input(1, "xrp")
            return first, second
        finally:
            await client.aclose()

    assert asyncio.run(_run()) == (Validity.VALID, Validity.INVALID)
    assert store.settings.symbols == ["btc", "eth"]
    assert backend.document is not None
    assert backend.document["symbols"] == ["btc", "eth"]
    assert backend.saves == 1


def test_empty_input_clears_slot_and_saves() -> None:
    backend, store, client, _, _, screen = _build(
        _no_requests,
        {"apiKey": "k", "symbols": ["btc", "eth"], "availableSymbols": ["BTC", "ETH"]},
    )

    async def _run() -> Validity:
        try:
            await store.load()
            return await screen.set_symbol_input(1, "   ")
        finally:
            await client.aclose()

    assert asyncio.run(_run()) is Validity.EMPTY
    assert store.settings.symbols == ["btc"]
    assert backend.saves == 1


def test_symbol_change_is_saved_before_restart_when_armed() -> None:
    backend, store, client, _, scheduler, screen = _build(
        _no_requests,
        {"apiKey": "k", "availableSymbols": ["BTC"]},
    )

    async def _run() -> None:
        try:
            await store.load()
            scheduler.arm()
            await screen.set_symbol_input(0, "BTC")
            # Same value again: nothing to save, nothing to restart.
            await screen.set_symbol_input(0, "btc")
        finally:
            await scheduler.aclose()
            await client.aclose()

    asyncio.run(_run())
    assert scheduler.restarts == [True]
    assert scheduler.saves_at_restart == [1]


def test_idle_scheduler_is_not_armed_by_settings_changes() -> None:
    _, store, client, _, scheduler, screen = _build(
        _no_requests,
        {"apiKey": "k", "availableSymbols": ["BTC"]},
    )

    async def _run() -> None:
        try:
            await store.load()
            await screen.set_symbol_input(0, "btc")
            await screen.set_refresh_interval("5")
        finally:
            await client.aclose()

    asyncio.run(_run())
    assert scheduler.restarts == []
    assert scheduler.state == "idle"
    assert store.settings.refresh_interval == 300


def test_refresh_interval_ignores_non_numeric_and_non_positive_input() -> None:
    backend, store, client, _, _, screen = _build(_no_requests, {"refreshInterval": 900})

    async def _run() -> list[bool]:
        try:
            await store.load()
            return [
                await screen.set_refresh_interval("soon"),
                await screen.set_refresh_interval("0"),
                await screen.set_refresh_interval(" 10 "),
            ]
        finally:
            await client.aclose()

    assert asyncio.run(_run()) == [False, False, True]
    assert store.settings.refresh_interval == 600
    assert backend.saves == 1


def test_fetch_symbols_replaces_universe_wholesale() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/cryptosymbols"
        return httpx.Response(200, json={"symbols": ["ETH", "SOL"]})

    backend, store, client, notifier, _, screen = _build(
        handler,
        {"apiKey": "k", "availableSymbols": ["BTC"]},
    )

    async def _run() -> bool:
        try:
            await store.load()
            return await screen.fetch_symbols()
        finally:
            await client.aclose()

    assert asyncio.run(_run()) is True
    assert store.settings.available_symbols == ["ETH", "SOL"]
    assert backend.document is not None
    assert backend.document["availableSymbols"] == ["ETH", "SOL"]
    assert [n.text for n in notifier.recent()] == [SYMBOLS_FETCHED_NOTICE]


def test_fetch_symbols_failure_keeps_previous_universe_and_notifies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid API Key."})

    backend, store, client, notifier, _, screen = _build(
        handler,
        {"apiKey": "bad", "availableSymbols": ["BTC"]},
    )

    async def _run() -> bool:
        try:
            await store.load()
            return await screen.fetch_symbols()
        finally:
            await client.aclose()

    assert asyncio.run(_run()) is False
    assert store.settings.available_symbols == ["BTC"]
    assert backend.saves == 0
    assert [n.text for n in notifier.recent()] == [SYMBOLS_FAILED_NOTICE]


def test_setting_api_key_saves_trimmed_key_and_fetches_universe() -> None:
    seen_keys: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_keys.append(request.headers["X-Api-Key"])
        return httpx.Response(200, json={"symbols": ["BTC"]})

    backend, store, client, _, _, screen = _build(handler, {})

    async def _run() -> None:
        try:
            await store.load()
            await screen.set_api_key("  fresh-key ")
        finally:
            await client.aclose()

    asyncio.run(_run())
    assert store.settings.api_key == "fresh-key"
    assert seen_keys == ["fresh-key"]
    assert store.settings.available_symbols == ["BTC"]
    assert backend.document is not None
    assert backend.document["apiKey"] == "fresh-key"


def test_clearing_api_key_skips_universe_fetch() -> None:
    _, store, client, _, _, screen = _build(_no_requests, {"apiKey": "old"})

    async def _run() -> None:
        try:
            await store.load()
            await screen.set_api_key("   ")
        finally:
            await client.aclose()

    asyncio.run(_run())
    assert store.settings.api_key == ""


def test_symbol_inputs_report_five_slots() -> None:
    _, store, client, _, _, screen = _build(
        _no_requests,
        {"symbols": ["btc", "", "doge"], "availableSymbols": ["BTC"]},
    )

    async def _run() -> list[tuple[str, Validity]]:
        try:
            await store.load()
            return screen.symbol_inputs()
        finally:
            await client.aclose()

    assert asyncio.run(_run()) == [
        ("btc", Validity.VALID),
        ("", Validity.EMPTY),
        ("doge", Validity.INVALID),
        ("", Validity.EMPTY),
        ("", Validity.EMPTY),
    ]

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from crypto_panel.api import CryptoPriceClient
from crypto_panel.engine import PriceFetcher, RefreshScheduler, SettingsScreen
from crypto_panel.notifications import ToastNotifier
from crypto_panel.panel import Panel, PanelRenderer
from crypto_panel.persistence import DocumentStore, SqlDocumentStore
from crypto_panel.rendering import HtmlPanelRenderer
from crypto_panel.settings import Settings
from crypto_panel.store import PanelSettings, SettingsStore

logger = logging.getLogger("crypto_panel.app")


@dataclass
class AppState:
    config: Settings
    documents: DocumentStore
    store: SettingsStore
    client: CryptoPriceClient
    fetcher: PriceFetcher
    notifier: ToastNotifier
    panel: Panel
    scheduler: RefreshScheduler
    screen: SettingsScreen


def build_app_state(
    config: Settings,
    *,
    documents: DocumentStore | None = None,
    renderer: PanelRenderer | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    documents = documents if documents is not None else SqlDocumentStore(config.database_url)
    store = SettingsStore(
        backend=documents,
        defaults=PanelSettings(
            api_key=config.api_key.strip(),
            refresh_interval=config.default_refresh_interval_seconds,
        ),
    )
    client = CryptoPriceClient(
        base_url=config.api_base_url,
        timeout_seconds=config.http_timeout_seconds,
        transport=transport,
    )
    fetcher = PriceFetcher(client=client)
    notifier = ToastNotifier()
    panel = Panel(renderer=renderer if renderer is not None else HtmlPanelRenderer())
    scheduler = RefreshScheduler(
        store=store,
        fetcher=fetcher,
        panel=panel,
        notifier=notifier,
        min_staleness_seconds=config.min_staleness_seconds,
    )
    screen = SettingsScreen(store=store, fetcher=fetcher, scheduler=scheduler, notifier=notifier)
    return AppState(
        config=config,
        documents=documents,
        store=store,
        client=client,
        fetcher=fetcher,
        notifier=notifier,
        panel=panel,
        scheduler=scheduler,
        screen=screen,
    )


async def startup(state: AppState) -> None:
    await state.documents.init()
    await state.store.load()
    logger.info("app_started", extra={"interval_s": state.store.settings.refresh_interval})


async def shutdown(state: AppState) -> None:
    try:
        await state.scheduler.aclose()
    finally:
        await state.client.aclose()
        await state.notifier.aclose()
        await state.documents.aclose()
    logger.info("app_stopped")

from __future__ import annotations

import asyncio
import logging

import typer
import uvicorn

from crypto_panel.api import CryptoPriceClient, FetchFailed
from crypto_panel.engine import PriceFetcher
from crypto_panel.logging_utils import configure_logging
from crypto_panel.rendering import format_timestamp
from crypto_panel.settings import Settings
from crypto_panel.types import SYMBOL_SLOTS
from crypto_panel.validation import fold
from crypto_panel.web import create_app

app = typer.Typer(no_args_is_help=True, add_completion=False)
logger = logging.getLogger("crypto_panel")


def _client(settings: Settings) -> CryptoPriceClient:
    return CryptoPriceClient(
        base_url=settings.api_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )


@app.command()
def show_config() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    redacted = settings.model_dump()
    redacted["api_key"] = "***" if redacted["api_key"] else ""
    logger.info("loaded_config")
    typer.echo(redacted)


@app.command()
def symbols() -> None:
    """
    Fetch and print the symbols the price API knows about.
    """
    settings = Settings()
    configure_logging(settings.log_level)

    async def _run() -> list[str]:
        client = _client(settings)
        try:
            return await PriceFetcher(client=client).fetch_universe(api_key=settings.api_key)
        finally:
            await client.aclose()

    try:
        universe = asyncio.run(_run())
    except FetchFailed as e:
        typer.echo(f"failed to fetch symbols: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo({"ok": True, "count": len(universe), "symbols": universe})


@app.command()
def quotes(
    symbol: list[str] = typer.Option(..., "--symbol", "-s", help="Ticker symbol, e.g. btc."),
) -> None:
    """
    Fetch one price per symbol, in order, and print them.
    """
    settings = Settings()
    configure_logging(settings.log_level)

    wanted = [fold(s) for s in symbol if s.strip()]
    if len(wanted) > SYMBOL_SLOTS:
        raise typer.BadParameter(f"at most {SYMBOL_SLOTS} symbols")

    async def _run():
        client = _client(settings)
        try:
            return await PriceFetcher(client=client).fetch_all(wanted, api_key=settings.api_key)
        finally:
            await client.aclose()

    result = asyncio.run(_run())
    if result is None:
        typer.echo("no data: a price request failed", err=True)
        raise typer.Exit(code=1)
    for q in result:
        typer.echo(f"{q.symbol.upper()}\t{q.price}\tUpdated: {format_timestamp(q.timestamp_ms)}")


@app.command()
def serve() -> None:
    """
    Run the panel and settings endpoints.
    """
    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(config=settings), host=settings.host, port=settings.port, log_config=None)

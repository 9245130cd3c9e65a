from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from crypto_panel.api import CryptoPriceClient, FetchFailed
from crypto_panel.types import PriceQuote

logger = logging.getLogger("crypto_panel.fetcher")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PriceFetcher:
    def __init__(self, *, client: CryptoPriceClient) -> None:
        self._client = client

    async def fetch_all(self, symbols: Sequence[str], *, api_key: str) -> list[PriceQuote] | None:
        """
        Fetch one quote per symbol, in order, one request at a time.

        Returns None when any request fails; quotes gathered before the
        failure are dropped.
        """
        quotes: list[PriceQuote] = []
        for symbol in symbols:
            try:
                price = await self._client.price(symbol, api_key=api_key)
            except FetchFailed as e:
                logger.warning(
                    "fetch_failed",
                    extra={
                        "symbol": symbol,
                        "count": len(quotes),
                        "status_code": getattr(e, "status_code", None),
                    },
                    exc_info=e,
                )
                return None
            quotes.append(PriceQuote(symbol=symbol, price=price, timestamp_ms=_now_ms()))
        return quotes

    async def fetch_universe(self, *, api_key: str) -> list[str]:
        symbols = await self._client.symbols(api_key=api_key)
        logger.info("universe_fetched", extra={"count": len(symbols)})
        return symbols

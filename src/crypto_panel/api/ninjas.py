from __future__ import annotations

from typing import Any

import httpx

from crypto_panel.api.errors import BadResponse, NetworkError, NoApiKey
from crypto_panel.types import NOT_AVAILABLE

DEFAULT_BASE_URL = "https://api.api-ninjas.com"
PRICE_PATH = "/v1/cryptoprice"
SYMBOLS_PATH = "/v1/cryptosymbols"


def _extract_price(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise BadResponse(status_code=200, payload=payload, reason="price body is not an object")
    price = payload.get("price")
    if price is None or price == "":
        return NOT_AVAILABLE
    return str(price)


def _extract_symbols(payload: Any) -> list[str]:
    symbols = payload.get("symbols") if isinstance(payload, dict) else None
    if not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols):
        raise BadResponse(status_code=200, payload=payload, reason="symbols body has no symbol list")
    return list(symbols)


class CryptoPriceClient:
    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def price(self, symbol: str, *, api_key: str) -> str:
        data = await self._request(PRICE_PATH, api_key=api_key, params={"symbol": symbol})
        return _extract_price(data)

    async def symbols(self, *, api_key: str) -> list[str]:
        data = await self._request(SYMBOLS_PATH, api_key=api_key, params={})
        return _extract_symbols(data)

    async def _request(self, path: str, *, api_key: str, params: dict[str, Any]) -> Any:
        if not api_key.strip():
            raise NoApiKey()
        try:
            response = await self._client.get(
                path,
                params=params,
                headers={"X-Api-Key": api_key},
            )
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise NetworkError(f"{path} request failed: {e!r}") from e

        if not response.is_success:
            payload: Any
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise BadResponse(status_code=response.status_code, payload=payload)

        try:
            return response.json()
        except ValueError as e:
            raise BadResponse(
                status_code=response.status_code,
                payload=response.text,
                reason="body is not JSON",
            ) from e

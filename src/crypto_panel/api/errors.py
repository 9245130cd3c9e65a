from __future__ import annotations

from typing import Any


class FetchFailed(RuntimeError):
    """A price or symbol request produced no usable data."""


class NetworkError(FetchFailed):
    pass


class BadResponse(FetchFailed):
    def __init__(self, *, status_code: int, payload: Any, reason: str = "bad response"):
        super().__init__(f"{reason}: status={status_code} payload={payload!r}")
        self.status_code = status_code
        self.payload = payload


class NoApiKey(FetchFailed):
    def __init__(self) -> None:
        super().__init__("API key is empty; set it in the settings screen")

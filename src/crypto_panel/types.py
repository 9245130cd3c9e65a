from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

NOT_AVAILABLE = "N/A"
SYMBOL_SLOTS = 5


class Validity(str, Enum):
    EMPTY = "empty"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    # Numeric text as returned by the API, or NOT_AVAILABLE.
    price: str
    timestamp_ms: int

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from jinja2 import Environment, PackageLoader, select_autoescape

from crypto_panel.types import PriceQuote
from crypto_panel.validation import is_available


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M UTC")


@dataclass(frozen=True)
class QuoteRow:
    label: str
    price: str
    updated: str
    available: bool


def build_rows(quotes: Sequence[PriceQuote], *, universe: Iterable[str]) -> list[QuoteRow]:
    known = list(universe)
    return [
        QuoteRow(
            label=q.symbol.upper(),
            price=q.price,
            updated=format_timestamp(q.timestamp_ms),
            available=is_available(q.symbol, known),
        )
        for q in quotes
    ]


class HtmlPanelRenderer:
    def __init__(self, *, template_name: str = "panel.html") -> None:
        self._env = Environment(
            loader=PackageLoader("crypto_panel", "templates"),
            autoescape=select_autoescape(["html"]),
        )
        self._template_name = template_name

    def render(self, quotes: Sequence[PriceQuote], *, universe: Iterable[str]) -> str:
        template = self._env.get_template(self._template_name)
        return template.render(rows=build_rows(quotes, universe=universe))

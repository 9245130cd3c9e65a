from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from crypto_panel.types import PriceQuote

logger = logging.getLogger("crypto_panel.panel")


class PanelRenderer(Protocol):
    def render(self, quotes: Sequence[PriceQuote], *, universe: Iterable[str]) -> str: ...


class Panel:
    def __init__(self, *, renderer: PanelRenderer) -> None:
        self._renderer = renderer
        self._quotes: list[PriceQuote] = []
        self._content = ""
        self._is_open = False
        self._renders = 0

    @property
    def quotes(self) -> list[PriceQuote]:
        return list(self._quotes)

    @property
    def content(self) -> str:
        return self._content

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def renders(self) -> int:
        return self._renders

    def render_empty(self) -> str:
        return self._renderer.render([], universe=[])

    def open(self) -> None:
        self._is_open = True

    def close(self) -> None:
        self._is_open = False

    def show(self, quotes: Sequence[PriceQuote] | None, *, universe: Iterable[str]) -> bool:
        if quotes is None:
            logger.info("panel_kept_previous")
            return False
        self._quotes = list(quotes)
        self._content = self._renderer.render(self._quotes, universe=universe)
        self._renders += 1
        logger.info("panel_rendered", extra={"count": len(self._quotes)})
        return True

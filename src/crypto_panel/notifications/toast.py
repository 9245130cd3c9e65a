from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger("crypto_panel.notices")


@dataclass(frozen=True)
class Notice:
    text: str
    timestamp_ms: int


class ToastNotifier:
    def __init__(self, *, max_notices: int = 20) -> None:
        self._notices: deque[Notice] = deque(maxlen=max(1, max_notices))

    def enabled(self) -> bool:
        return True

    async def aclose(self) -> None:
        return

    async def send(self, text: str) -> None:
        self._notices.append(Notice(text=text, timestamp_ms=int(time.time() * 1000)))
        logger.info(text)

    def recent(self) -> list[Notice]:
        return list(self._notices)

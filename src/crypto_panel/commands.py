from __future__ import annotations

import logging

from crypto_panel.app_state import AppState

logger = logging.getLogger("crypto_panel.commands")


async def open_panel(state: AppState) -> bool:
    """Show the panel and start the timer; reopening within the staleness window reuses the last quotes."""
    logger.info("command", extra={"command": "open"})
    state.panel.open()
    state.scheduler.arm()
    return await state.scheduler.trigger()


async def refresh(state: AppState) -> bool:
    logger.info("command", extra={"command": "refresh"})
    # Also arms an idle timer; the next tick is a full interval after this refresh.
    return await state.scheduler.restart(refresh=True)


async def close_panel(state: AppState) -> None:
    logger.info("command", extra={"command": "close"})
    state.panel.close()
    state.scheduler.teardown()

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from crypto_panel.app_state import AppState, build_app_state, shutdown, startup
from crypto_panel.settings import Settings
from crypto_panel.web.routes import router

logger = logging.getLogger("crypto_panel.web")


def create_app(*, config: Settings | None = None, state: AppState | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_state = state if state is not None else build_app_state(config or Settings())
        logger.info("starting crypto panel")
        await startup(app_state)
        app.state.panel = app_state
        try:
            yield
        finally:
            logger.info("shutting down")
            await shutdown(app_state)

    app = FastAPI(lifespan=lifespan)
    app.include_router(router)
    return app

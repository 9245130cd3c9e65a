from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from crypto_panel import commands
from crypto_panel.app_state import AppState
from crypto_panel.store import SettingsError
from crypto_panel.types import SYMBOL_SLOTS

router = APIRouter()


class TextPayload(BaseModel):
    value: str


def _state(request: Request) -> AppState:
    return request.app.state.panel


@router.get("/", response_class=HTMLResponse)
async def panel_page(request: Request):
    state = _state(request)
    # Viewing the page is a display request: it arms the timer and fetches unless fresh.
    await commands.open_panel(state)
    return HTMLResponse(state.panel.content or state.panel.render_empty())


@router.get("/api/panel")
async def get_panel(request: Request):
    state = _state(request)
    return {
        "open": state.panel.is_open,
        "scheduler": state.scheduler.state,
        "interval_s": state.scheduler.armed_interval_s,
        "last_fetch_s": state.scheduler.last_fetch_s,
        "quotes": [asdict(q) for q in state.panel.quotes],
    }


@router.post("/api/commands/open")
async def open_command(request: Request):
    fetched = await commands.open_panel(_state(request))
    return {"ok": True, "fetched": fetched}


@router.post("/api/commands/refresh")
async def refresh_command(request: Request):
    fetched = await commands.refresh(_state(request))
    if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
        return RedirectResponse("/", status_code=303)
    return {"ok": True, "fetched": fetched}


@router.post("/api/commands/close")
async def close_command(request: Request):
    await commands.close_panel(_state(request))
    return {"ok": True}


@router.get("/api/settings")
async def get_settings(request: Request):
    state = _state(request)
    settings = state.store.settings
    return {
        "api_key": "***" if settings.api_key else "",
        "refresh_interval_minutes": settings.refresh_interval // 60,
        "symbols": [
            {"slot": i, "text": text, "validity": validity.value}
            for i, (text, validity) in enumerate(state.screen.symbol_inputs())
        ],
        "available_symbols": len(settings.available_symbols),
    }


@router.put("/api/settings/api-key")
async def put_api_key(payload: TextPayload, request: Request):
    await _state(request).screen.set_api_key(payload.value)
    return {"ok": True}


@router.put("/api/settings/refresh-interval")
async def put_refresh_interval(payload: TextPayload, request: Request):
    accepted = await _state(request).screen.set_refresh_interval(payload.value)
    return {"ok": accepted}


@router.put("/api/settings/symbols/{index}")
async def put_symbol(index: int, payload: TextPayload, request: Request):
    if not (0 <= index < SYMBOL_SLOTS):
        raise HTTPException(status_code=404, detail=f"no symbol slot {index}")
    try:
        validity = await _state(request).screen.set_symbol_input(index, payload.value)
    except SettingsError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return {"slot": index, "validity": validity.value}


@router.post("/api/settings/symbols/fetch")
async def fetch_symbols(request: Request):
    ok = await _state(request).screen.fetch_symbols()
    return {"ok": ok}


@router.get("/api/notices")
async def get_notices(request: Request):
    return [asdict(n) for n in _state(request).notifier.recent()]

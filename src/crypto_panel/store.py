from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from crypto_panel.persistence import DocumentStore
from crypto_panel.types import SYMBOL_SLOTS

logger = logging.getLogger("crypto_panel.store")

DEFAULT_REFRESH_INTERVAL_SECONDS = 60 * 60


class SettingsError(RuntimeError):
    pass


class PanelSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: str = Field(default="", alias="apiKey")
    # Positional input slots; "" marks a blank slot.
    symbols: list[str] = Field(default_factory=list, max_length=SYMBOL_SLOTS)
    refresh_interval: int = Field(
        default=DEFAULT_REFRESH_INTERVAL_SECONDS,
        ge=1,
        alias="refreshInterval",
    )
    available_symbols: list[str] = Field(default_factory=list, alias="availableSymbols")

    @field_validator("available_symbols", mode="before")
    @classmethod
    def _unwrap_symbols_payload(cls, value: Any) -> Any:
        # Older documents stored the raw `{"symbols": [...]}` API payload.
        if isinstance(value, dict):
            return value.get("symbols", [])
        return value

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SettingsStore:
    def __init__(self, *, backend: DocumentStore, defaults: PanelSettings | None = None) -> None:
        self._backend = backend
        self._defaults = defaults if defaults is not None else PanelSettings()
        self._settings = self._defaults.model_copy(deep=True)
        self._save_lock = asyncio.Lock()

    @property
    def settings(self) -> PanelSettings:
        return self._settings

    async def load(self) -> PanelSettings:
        persisted = await self._backend.load()
        if persisted is None:
            persisted = {}
        if not isinstance(persisted, dict):
            raise SettingsError(f"settings document must be an object, got {type(persisted).__name__}")

        # Shallow: a persisted key replaces the default value as a whole.
        merged = {**self._defaults.to_document(), **persisted}
        try:
            self._settings = PanelSettings.model_validate(merged)
        except ValidationError as e:
            raise SettingsError(f"invalid settings document: {e}") from e
        logger.info("settings_loaded", extra={"count": len(self._settings.symbols)})
        return self._settings

    async def save(self) -> None:
        async with self._save_lock:
            await self._backend.save(self._settings.to_document())

    async def update(self, **changes: Any) -> bool:
        """
        Apply `changes` (field names), persist, and report whether anything changed.

        The new settings are validated as a whole before they replace the
        current ones; an invalid change raises `SettingsError` and leaves the
        store untouched.
        """
        current = self._settings.model_dump()
        candidate = {**current, **changes}
        if candidate == current:
            return False
        try:
            updated = PanelSettings.model_validate(candidate)
        except ValidationError as e:
            raise SettingsError(f"invalid settings change: {e}") from e
        self._settings = updated
        await self.save()
        return True

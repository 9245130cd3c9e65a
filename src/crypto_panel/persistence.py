from __future__ import annotations

import copy
import json
from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import Field, SQLModel, select


class DocumentStore(Protocol):
    async def init(self) -> None: ...

    async def load(self) -> dict[str, Any] | None: ...

    async def save(self, document: dict[str, Any]) -> None: ...

    async def aclose(self) -> None: ...


class SettingsDocument(SQLModel, table=True):
    id: Optional[int] = Field(default=1, primary_key=True)
    data: str = Field(default="{}", description="Settings document as JSON text")


class SqlDocumentStore:
    """Keeps the settings document as a single JSON row."""

    def __init__(self, database_url: str) -> None:
        self._engine: AsyncEngine = create_async_engine(database_url, echo=False, future=True)
        self._sessions = async_sessionmaker(bind=self._engine, expire_on_commit=False)

    async def init(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def load(self) -> dict[str, Any] | None:
        async with self._sessions() as session:
            result = await session.execute(select(SettingsDocument).where(SettingsDocument.id == 1))
            row = result.scalars().first()
        if row is None:
            return None
        return json.loads(row.data)

    async def save(self, document: dict[str, Any]) -> None:
        async with self._sessions() as session:
            row = await session.get(SettingsDocument, 1)
            if row is None:
                row = SettingsDocument(id=1)
            row.data = json.dumps(document, ensure_ascii=False)
            session.add(row)
            await session.commit()

    async def aclose(self) -> None:
        await self._engine.dispose()


class MemoryDocumentStore:
    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self.document = copy.deepcopy(document) if document is not None else None
        self.saves = 0

    async def init(self) -> None:
        return

    async def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.document)

    async def save(self, document: dict[str, Any]) -> None:
        self.document = copy.deepcopy(document)
        self.saves += 1

    async def aclose(self) -> None:
        return

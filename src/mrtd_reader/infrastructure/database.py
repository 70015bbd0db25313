"""Async engine and transactional sessions for the passport store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mrtd_reader.config import ReaderSettings

from .models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class DatabaseConfig:
    """Location of the saved passports database."""

    url: str
    echo: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> DatabaseConfig:
        return cls(url=raw["url"], echo=bool(raw.get("echo", False)))

    @classmethod
    def from_settings(cls, settings: ReaderSettings) -> DatabaseConfig:
        return cls(url=settings.database_url, echo=settings.database_echo)

    @property
    def backend(self) -> str:
        return make_url(self.url).get_backend_name()


class DatabaseManager:
    """Owns the store's async engine and hands out sessions bound to one transaction."""

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.config.url, echo=self.config.echo)
            logger.debug("Created %s engine for the passport store", self.config.backend)
        return self._engine

    @property
    def sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._sessions is None:
            self._sessions = async_sessionmaker(
                self.engine, expire_on_commit=False, autoflush=False
            )
        return self._sessions

    async def create_all(self) -> None:
        """Create the passport and photo tables if they are missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Passport store schema ready on %s", self.config.backend)

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on exit and rolls back if the body raises."""
        async with self.sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def run_within_transaction(self, handler: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_scope() as session:
            return await handler(session)

import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from portal.core.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Store:
    """Owns the engine and session factory for one application instance.

    Created by the app factory and opened/closed by its lifespan; handlers
    reach it through the ``get_store``/``get_session`` dependencies.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    def _engine_options(self) -> dict:
        options = {"echo": self.settings.DB_ECHO, "future": True}
        # sqlite (tests, local runs) uses its own pool without sizing knobs
        if not self.settings.DATABASE_URL.startswith("sqlite"):
            options.update(
                pool_size=self.settings.DB_POOL_SIZE,
                max_overflow=self.settings.DB_MAX_OVERFLOW,
                pool_pre_ping=True,
                pool_recycle=300,
                pool_timeout=30,
            )
        return options

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    async def open(self, create_schema: bool = True) -> None:
        if self.engine is not None:
            return
        self.engine = create_async_engine(self.settings.DATABASE_URL, **self._engine_options())
        self._sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        if create_schema:
            await self.init_db()
        logger.info("Store opened")

    async def init_db(self) -> None:
        async with self.engine.begin() as conn:
            # Import all models here to ensure they are created
            from portal.models import user, employee, project, deliverable, renewal  # noqa: F401
            await conn.run_sync(Base.metadata.create_all)

    async def healthcheck(self) -> bool:
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database healthcheck failed: {e}")
            return False

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Store closed")
        self.engine = None
        self._sessionmaker = None

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Store is not open")
        return self._sessionmaker()


def get_store(request: Request) -> Store:
    return request.app.state.store


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with get_store(request).session() as session:
        try:
            yield session
        finally:
            await session.close()

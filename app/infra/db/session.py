# app/infra/db/session.py
from typing import AsyncGenerator, Iterable

from fastapi import Request
from sqlalchemy import Table, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)

from app.infra.db.base import Base


class Database:
    """
    Handle explícito sobre una base (engine + fábrica de sesiones).

    Each service builds its own and hangs it on ``app.state.db``; there is no
    module-level engine.
    """

    def __init__(self, url: str, tables: Iterable[Table] | None = None, echo: bool = False):
        self.url = url
        self.tables = list(tables) if tables is not None else None
        # hide_parameters: el echo de SQL nunca muestra valores (número, cvv)
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, hide_parameters=True, future=True
        )
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    async def init_models(self) -> None:
        """Crea las tablas (en dev). En prod usa migraciones."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, tables=self.tables)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependencia FastAPI para obtener una sesión async."""
    database: Database = request.app.state.db
    async with database.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from liftlog.config import settings


def _ensure_db_dir(db_path: str) -> None:
    p = Path(db_path)
    if p.parent and str(p.parent) not in ("", "."):
        os.makedirs(p.parent, exist_ok=True)


def make_engine(url: str | None = None) -> AsyncEngine:
    url = url or settings.database_url
    if url:
        return create_async_engine(url, future=True, echo=False)

    _ensure_db_dir(settings.db_path)
    return create_async_engine(f"sqlite+aiosqlite:///{settings.db_path}", future=True, echo=False)


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False)


engine: AsyncEngine = make_engine()
SessionLocal: async_sessionmaker[AsyncSession] = make_sessionmaker(engine)

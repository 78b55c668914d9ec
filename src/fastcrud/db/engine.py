# src/fastcrud/db/engine.py

"""
[职责] 数据库引擎与会话工厂：创建 AsyncEngine / async_sessionmaker，并提供建表/删表入口。
[边界] 不包含实体表定义；不包含业务事务编排（由 repository.transaction 负责）；不负责迁移。
[上游关系] config.py / 环境变量提供连接串；CrudApp 启动时可调用 init_db。
[下游关系] SqlAlchemyCrudRepository 依赖 sessionmaker；api/deps.get_session 复用 get_sessionmaker；tests 复用 create_sessionmaker。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import MetaData, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from fastcrud.config import settings

from .base import Base


def _default_db_url() -> str:
    """Fallback: local sqlite file under repo-root/.Local."""
    db_path = settings.local_root / "fastcrud.db"
    return f"sqlite+aiosqlite:///{db_path.as_posix()}"


def resolve_db_url(override: str | None = None) -> str:
    """
    Resolve database URL.

    Priority:
        1) explicit override
        2) settings: FASTCRUD_DATABASE_URL (loads .env)
        3) env: DATABASE_URL
        4) fallback: local sqlite file
    """
    if override:
        return override
    s_url = str(settings.FASTCRUD_DATABASE_URL or "").strip()
    if s_url:
        return s_url
    env_url = os.getenv("DATABASE_URL", "").strip()
    if env_url:
        return env_url
    return _default_db_url()


def _ensure_sqlite_dir(db_url: str) -> None:
    url = make_url(db_url)
    if not url.drivername.startswith("sqlite"):
        return
    database = url.database or ""
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)  # docstring: sqlite 文件目录需预先存在


def create_engine(*, url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create AsyncEngine."""  # docstring: 生产/测试都可复用；测试可传入临时 sqlite 文件路径
    db_url = resolve_db_url(url)
    _ensure_sqlite_dir(db_url)
    db_echo = echo if echo is not None else settings.FASTCRUD_SQL_ECHO

    return create_async_engine(
        db_url,
        echo=db_echo,
        pool_pre_ping=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async sessionmaker."""  # docstring: 统一 expire_on_commit=False，提交后仍可读取属性
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


_ENGINE: Optional[AsyncEngine] = None
_SESSION_FACTORY: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Lazily created process-wide engine."""
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_engine()
    return _ENGINE


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    global _SESSION_FACTORY
    if _SESSION_FACTORY is None:
        _SESSION_FACTORY = create_sessionmaker(get_engine())
    return _SESSION_FACTORY


async def init_db(*, engine: AsyncEngine | None = None, metadata: MetaData | None = None) -> None:
    """
    Initialize database schema (create_all).

    Callers must import their ORM models first so tables are registered on the metadata.
    """
    eng = engine or get_engine()
    meta = metadata if metadata is not None else Base.metadata
    async with eng.begin() as conn:
        await conn.run_sync(meta.create_all)


async def drop_db(*, engine: AsyncEngine | None = None, metadata: MetaData | None = None) -> None:
    """Drop all tables. Only for local/dev/tests."""
    eng = engine or get_engine()
    meta = metadata if metadata is not None else Base.metadata
    async with eng.begin() as conn:
        await conn.run_sync(meta.drop_all)

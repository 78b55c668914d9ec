# playground/conftest.py

"""
[职责] 共享 fixtures：隔离的临时 sqlite 引擎、sessionmaker 与单个 AsyncSession。
[边界] 每个测试独立数据库文件；不触碰默认 .Local 路径。
[上游关系] fastcrud.db.engine（create_engine/create_sessionmaker/init_db）。
[下游关系] sql_gate / fastapi_gate 使用这些 fixtures；ORM 表由各 gate 模块在 Base 上声明。
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC_ROOT = _REPO_ROOT / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))  # docstring: ensure local src import

from fastcrud.db.engine import create_engine, create_sessionmaker, drop_db, init_db


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    db_file = tmp_path / "gate.db"  # docstring: 独立临时 sqlite 文件
    eng = create_engine(url=f"sqlite+aiosqlite:///{db_file}", echo=False)
    await init_db(engine=eng)  # docstring: create_all（含已导入 gate 模块声明的表）
    try:
        yield eng
    finally:
        await drop_db(engine=eng)
        await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as s:
        yield s

# src/fastcrud/api/deps.py

"""
[职责] API 依赖装配：提供 session 与文档注册表注入。
[边界] 不做业务逻辑；不提交事务。
[上游关系] FastAPI 路由层调用依赖注入。
[下游关系] health/swagger routers 通过本模块获取依赖实例。
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from fastcrud.db.engine import get_sessionmaker
from fastcrud.swagger.registry import DocumentRegistry


async def get_session() -> AsyncIterator[AsyncSession]:
    """每个 request 一个 session；不提交/回滚事务。"""
    async with get_sessionmaker()() as session:
        yield session


def get_registry(request: Request) -> Optional[DocumentRegistry]:
    """读取 CrudApp.build 挂在 app.state 上的注册表。"""
    return getattr(request.app.state, "registry", None)

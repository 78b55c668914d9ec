# src/fastcrud/api/routers/health.py

"""
[职责] Health Router：数据库连通性与文档注册表状态摘要。
[边界] 只做轻量探测；不做业务写入。
[上游关系] 运维/监控系统调用健康检查接口。
[下游关系] DB 会话执行 SELECT 1；读取 app.state.registry。
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fastcrud.api.deps import get_registry, get_session
from fastcrud.config import settings
from fastcrud.swagger.registry import DocumentRegistry


router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(
    session: AsyncSession = Depends(get_session),
    registry: Optional[DocumentRegistry] = Depends(get_registry),
) -> Dict[str, Any]:
    status = "ok"
    db_status: Dict[str, Any] = {"ok": True}

    try:
        await session.execute(text("SELECT 1"))  # docstring: DB ping（最小读）
    except SQLAlchemyError as exc:
        db_status["ok"] = False
        db_status["error"] = f"{exc.__class__.__name__}: {exc}"
        status = "degraded"

    swagger_status: Dict[str, Any] = {"documents": 0, "frozen": False}
    if registry is not None:
        swagger_status = {"documents": len(registry), "frozen": registry.frozen}

    return {
        "status": status,
        "db": db_status,
        "swagger": swagger_status,
        "version": {"api": settings.FASTCRUD_DEFAULT_VERSION},
    }

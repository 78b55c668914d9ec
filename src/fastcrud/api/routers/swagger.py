# src/fastcrud/api/routers/swagger.py

"""
[职责] Swagger Router 工厂：输出按版本合并的文档、全量合并文档与单实体文档。
[边界] 只读 DocumentRegistry；不触发注册。
[上游关系] CrudApp.build 挂载；也可独立用于任意 registry。
[下游关系] 文档 UI / 客户端生成器消费 Swagger 2.0 JSON。
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from fastcrud.api.errors import request_id_of, to_json_response
from fastcrud.swagger.registry import DocumentRegistry
from fastcrud.utils.errors import NotFoundError


def build_swagger_router(registry: DocumentRegistry, *, prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix, tags=["swagger"])

    @router.get("/swagger")
    async def swagger_by_version() -> Dict[str, Any]:
        """version -> 合并文档。"""
        return {version: doc.to_swagger() for version, doc in registry.merged_by_version().items()}

    @router.get("/swagger.json")
    async def swagger_all() -> Dict[str, Any]:
        return registry.merged_all().to_swagger()

    @router.get("/swagger/{key}")
    async def swagger_entry(key: str, request: Request) -> Any:
        document = registry.get(key)
        if document is None:
            return to_json_response(
                NotFoundError(message="swagger document not found", detail={"key": key}),
                request_id=request_id_of(request),
            )
        return document.to_swagger()

    return router

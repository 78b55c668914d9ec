# src/fastcrud/api/routers/crud.py

"""
[职责] CRUD Router 工厂：把一个 CrudController 挂载为 FastAPI 路由（单实体 5 个 + 批量 3 个）。
[边界] 只负责 HTTP 取参（path id / 原始 body / query）与错误映射；业务语义全部委托 controller。
[上游关系] CrudApp.register_entity 为每个实体调用 build_crud_router。
[下游关系] CrudController 执行操作；api/errors.py 输出 ErrorResponse。
"""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List, Optional

from fastapi import APIRouter, Request

from fastcrud.api.errors import request_id_of, to_json_response
from fastcrud.crud.controller import CrudController
from fastcrud.utils.constants import BATCH_PATH


async def _respond(request: Request, pending: Awaitable[Dict[str, Any]]) -> Any:
    try:
        return await pending
    except Exception as exc:
        return to_json_response(exc, request_id=request_id_of(request))  # docstring: 异常映射为 ErrorResponse


def build_crud_router(
    controller: CrudController,
    *,
    prefix: str = "",
    tags: Optional[List[str]] = None,
) -> APIRouter:
    """
    [职责] 为单个实体构建路由。
    [边界] /batch 先于 /{id} 注册，避免 PUT/DELETE /batch 被 id 路由吞掉。
    """
    router = APIRouter(prefix=prefix, tags=tags or [controller.entity_name])
    name = controller.entity_name.lower()

    @router.post(BATCH_PATH, name=f"{name}_batch_create")
    async def batch_create(request: Request) -> Any:
        return await _respond(request, controller.batch_create(await request.body()))

    @router.put(BATCH_PATH, name=f"{name}_batch_update")
    async def batch_update(request: Request) -> Any:
        return await _respond(request, controller.batch_update(await request.body()))

    @router.delete(BATCH_PATH, name=f"{name}_batch_delete")
    async def batch_delete(request: Request) -> Any:
        return await _respond(request, controller.batch_delete(await request.body()))

    @router.get("", name=f"{name}_list")
    async def list_entities(request: Request) -> Any:
        return await _respond(request, controller.list(dict(request.query_params)))

    @router.post("", name=f"{name}_create")
    async def create_entity(request: Request) -> Any:
        return await _respond(request, controller.create(await request.body()))

    @router.get("/{id}", name=f"{name}_get")
    async def get_entity(id: str, request: Request) -> Any:
        return await _respond(request, controller.get_by_id(id))

    @router.put("/{id}", name=f"{name}_update")
    async def update_entity(id: str, request: Request) -> Any:
        return await _respond(request, controller.update(id, await request.body()))

    @router.delete("/{id}", name=f"{name}_delete")
    async def delete_entity(id: str, request: Request) -> Any:
        return await _respond(request, controller.delete(id))

    return router


__all__ = ["build_crud_router"]

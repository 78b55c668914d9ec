# src/fastcrud/crud/responser.py

"""
[职责] 响应格式化协作方：成功信封与分页信封。
[边界] 只构造 JSON-safe dict；不决定 HTTP status；实体经 pydantic 序列化（by_alias）。
[上游关系] CrudController 在每个操作结束时调用。
[下游关系] api/routers/crud.py 直接返回该 dict。
"""

from __future__ import annotations

import math
from typing import Any, Dict, Protocol, Sequence

from pydantic import BaseModel

from fastcrud.utils.constants import ENVELOPE_OK_CODE, ENVELOPE_OK_MESSAGE


class Responser(Protocol):
    def success(self, data: Any) -> Dict[str, Any]: ...

    def pagination(self, items: Sequence[Any], total: int, page: int, page_size: int) -> Dict[str, Any]: ...


def to_jsonable(data: Any) -> Any:
    """实体/实体列表 -> JSON-safe 结构。"""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


class JsonResponser:
    """默认信封：{"code": 0, "message": "success", "data": ...}。"""

    def success(self, data: Any) -> Dict[str, Any]:
        return {
            "code": ENVELOPE_OK_CODE,
            "message": ENVELOPE_OK_MESSAGE,
            "data": to_jsonable(data),
        }

    def pagination(self, items: Sequence[Any], total: int, page: int, page_size: int) -> Dict[str, Any]:
        total_pages = math.ceil(total / page_size) if page_size > 0 else 0  # docstring: 总页数向上取整
        return {
            "code": ENVELOPE_OK_CODE,
            "message": ENVELOPE_OK_MESSAGE,
            "data": {
                "items": to_jsonable(list(items)),
                "total": int(total),
                "page": int(page),
                "page_size": int(page_size),
                "total_pages": int(total_pages),
            },
        }

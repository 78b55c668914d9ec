# src/fastcrud/crud/query.py

"""
[职责] 从请求查询参数构建 QueryOptions（page/page_size/order_by + 其余参数作为等值过滤）。
[边界] 不校验过滤字段是否存在（由 repository 忽略未知列）；page_size 按配置封顶。
[上游关系] CrudController.list 调用。
[下游关系] repository.find/count 使用。
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from fastcrud.config import settings
from fastcrud.crud.repository import QueryOptions
from fastcrud.utils.errors import InvalidParameterError

PAGE_KEY = "page"
PAGE_SIZE_KEY = "page_size"
ORDER_BY_KEY = "order_by"
_RESERVED_KEYS = {PAGE_KEY, PAGE_SIZE_KEY, ORDER_BY_KEY}


def _positive_int(params: Mapping[str, Any], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise InvalidParameterError(message=f"invalid {key} parameter", detail={key: str(raw)}) from exc
    if value < 1:
        raise InvalidParameterError(message=f"invalid {key} parameter", detail={key: str(raw)})
    return value


def build_query_options(
    params: Optional[Mapping[str, Any]] = None,
    *,
    default_page_size: Optional[int] = None,
    max_page_size: Optional[int] = None,
) -> QueryOptions:
    params = params or {}
    default_size = default_page_size or settings.FASTCRUD_DEFAULT_PAGE_SIZE
    max_size = max_page_size or settings.FASTCRUD_MAX_PAGE_SIZE

    page = _positive_int(params, PAGE_KEY, 1)
    page_size = min(_positive_int(params, PAGE_SIZE_KEY, default_size), max_size)  # docstring: 封顶
    order_by = str(params.get(ORDER_BY_KEY) or "").strip() or None

    filters: Dict[str, Any] = {}
    for key, value in params.items():
        if key in _RESERVED_KEYS or value is None:
            continue
        filters[str(key)] = value

    return QueryOptions(page=page, page_size=page_size, order_by=order_by, filters=filters)

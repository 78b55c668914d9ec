# src/fastcrud/crud/__init__.py

"""
[职责] crud 聚合导出：控制器、仓储合同、查询选项与默认协作方（validator/responser）。
[边界] 仅做导入与 __all__ 暴露。
"""

from __future__ import annotations

from .controller import CrudController
from .query import build_query_options
from .repository import CrudRepository, QueryOptions
from .responser import JsonResponser, Responser
from .validator import validate_entity

__all__ = [
    "CrudController",
    "CrudRepository",
    "JsonResponser",
    "QueryOptions",
    "Responser",
    "build_query_options",
    "validate_entity",
]

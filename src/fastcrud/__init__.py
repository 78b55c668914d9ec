# src/fastcrud/__init__.py

"""
[职责] fastcrud 顶层导出：实体注册入口与最常用的契约类型。
[边界] 仅做导入与 __all__ 暴露。
"""

from __future__ import annotations

from fastcrud.api.app import CrudApp
from fastcrud.crud.controller import CrudController
from fastcrud.crud.repository import CrudRepository, QueryOptions
from fastcrud.schemas.ids import IdKind
from fastcrud.swagger.registry import DocumentRegistry

__version__ = "0.1.0"

__all__ = [
    "CrudApp",
    "CrudController",
    "CrudRepository",
    "DocumentRegistry",
    "IdKind",
    "QueryOptions",
]

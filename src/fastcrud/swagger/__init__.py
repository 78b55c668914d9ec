# src/fastcrud/swagger/__init__.py

"""
[职责] swagger 聚合导出：类型推导、Operation 构建、文档组装与注册表。
[边界] 仅做导入与 __all__ 暴露；不包含 HTTP 输出。
"""

from __future__ import annotations

from .assembler import DocumentAssembler, assemble
from .introspect import TypeIntrospector, schema_of
from .models import Document, Operation, Parameter, PathItem, ResponseSpec, RouteDescriptor, Schema, Tag
from .operation import OperationBuilder, build_operation
from .registry import DocumentRegistry, registry_key

__all__ = [
    "Document",
    "DocumentAssembler",
    "DocumentRegistry",
    "Operation",
    "OperationBuilder",
    "Parameter",
    "PathItem",
    "ResponseSpec",
    "RouteDescriptor",
    "Schema",
    "Tag",
    "TypeIntrospector",
    "assemble",
    "build_operation",
    "registry_key",
    "schema_of",
]

# src/fastcrud/swagger/operation.py

"""
[职责] RouteDescriptor -> Operation：补齐 path id 参数、POST/PUT 请求体参数与 200 响应。
[边界] 不做路径分组与定义收集（由 assembler 负责）；Schema 推导委托 TypeIntrospector。
[上游关系] assembler 逐条路由调用 build_operation。
[下游关系] Operation 写入 PathItem。
"""

from __future__ import annotations

from typing import Optional

from fastcrud.swagger.introspect import TypeIntrospector, sample_type
from fastcrud.swagger.models import Operation, Parameter, ResponseSpec, RouteDescriptor, Schema
from fastcrud.utils.constants import (
    BODY_PARAM_DESCRIPTION,
    BODY_PARAM_NAME,
    ID_PARAM_DESCRIPTION,
    ID_PARAM_NAME,
    ID_PATH_PARAM,
    ID_PLACEHOLDER,
    SUCCESS_DESCRIPTION,
    SUCCESS_STATUS,
)

_BODY_METHODS = ("POST", "PUT")  # docstring: 仅 create/update 类方法携带 body 参数


def has_id_placeholder(path: str) -> bool:
    return ID_PLACEHOLDER in path or ID_PATH_PARAM in path


class OperationBuilder:
    """
    [职责] 构建单条路由的 Operation。
    [边界] id 参数在文档层固定为 integer（与运行时 ID 表示无关）。
    """

    def __init__(self, introspector: Optional[TypeIntrospector] = None) -> None:
        self._introspector = introspector or TypeIntrospector()

    def build_operation(self, route: RouteDescriptor, entity_name: str) -> Operation:
        operation = Operation(
            tags=list(route.tags),
            summary=route.summary,
            description=route.description,
        )

        if has_id_placeholder(route.path):
            operation.parameters.append(
                Parameter(
                    name=ID_PARAM_NAME,
                    location="path",
                    description=ID_PARAM_DESCRIPTION,
                    required=True,
                    schema_=Schema(kind="integer"),
                )
            )  # docstring: path id 参数始终在首位

        if route.method in _BODY_METHODS:
            request_type = sample_type(route.request)
            if request_type is not None:
                body_schema = self._introspector.schema_of(request_type)
            else:
                body_schema = Schema.reference(entity_name)  # docstring: 无请求样本时引用实体定义
            operation.parameters.append(
                Parameter(
                    name=BODY_PARAM_NAME,
                    location="body",
                    description=BODY_PARAM_DESCRIPTION,
                    required=True,
                    schema_=body_schema,
                )
            )

        response_type = sample_type(route.response)
        if response_type is not None:
            operation.responses[SUCCESS_STATUS] = ResponseSpec(
                description=SUCCESS_DESCRIPTION,
                schema_=self._introspector.schema_of(response_type),
            )

        return operation


def build_operation(route: RouteDescriptor, entity_name: str) -> Operation:
    return OperationBuilder().build_operation(route, entity_name)

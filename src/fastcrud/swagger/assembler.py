# src/fastcrud/swagger/assembler.py

"""
[职责] 单实体单版本文档组装：按解析后路径分组路由、生成 Operation、收集实体与样本类型定义、生成 Tag。
[边界] 不存储文档（由 registry 负责）；不做跨实体合并。
[上游关系] CrudApp.register_entity / 调用方在启动阶段调用 assemble。
[下游关系] DocumentRegistry.register 存储产出的 Document。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from fastcrud.swagger.introspect import TypeIntrospector, sample_type, type_name
from fastcrud.swagger.models import Document, PathItem, RouteDescriptor, Schema, Tag
from fastcrud.swagger.operation import OperationBuilder
from fastcrud.utils.constants import ID_PATH_PARAM, ID_PLACEHOLDER
from fastcrud.utils.logging_ import get_logger, log_event


def resolve_path(route_path: str, path: str) -> str:
    """
    [职责] 拼接实体路由与相对路径，并把 :id 替换为文档约定 {id}（幂等）。
    """
    route = str(route_path or "").strip("/")
    full = f"/{route}{path}" if route else (path or "/")
    return full.replace(ID_PLACEHOLDER, ID_PATH_PARAM)


def entity_tag(entity_name: str) -> Tag:
    return Tag(name=entity_name, description=f"Operations about {entity_name}")


class DocumentAssembler:
    """
    [职责] 组装 per-entity/per-version Document。
    [边界] definitions 以裸类型名为键；同名不同形状时首写者保留并记录告警。
    """

    def __init__(
        self,
        introspector: Optional[TypeIntrospector] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._introspector = introspector or TypeIntrospector()
        self._operations = OperationBuilder(self._introspector)
        self._logger = logger or get_logger("swagger.assembler")

    def assemble(
        self,
        entity_type: Any,
        base_path: str,
        route_path: str,
        routes: Sequence[RouteDescriptor],
        version: str,
    ) -> Document:
        entity_type = sample_type(entity_type)
        entity_name = type_name(entity_type) or "Entity"
        self._introspector.drain_references()  # docstring: 丢弃上一次组装残留的引用

        # 按解析后路径分组（保持首次出现顺序）
        groups: Dict[str, List[RouteDescriptor]] = {}
        for route in routes:
            groups.setdefault(resolve_path(route_path, route.path), []).append(route)

        paths: Dict[str, PathItem] = {}
        for path, grouped in groups.items():
            item = PathItem()
            for route in grouped:
                item.set_operation(route.method, self._operations.build_operation(route, entity_name))
            paths[path] = item

        definitions: Dict[str, Schema] = {entity_name: self._introspector.schema_of(entity_type)}
        for grouped in groups.values():
            for route in grouped:
                for sample in (route.request, route.response):
                    self._collect_definition(definitions, sample, entity_name, route_path)

        # 环引用输出的 $ref 必须能在 definitions 中解析；补齐时可能产生新的引用，循环直至收敛
        pending = self._unresolved(definitions)
        while pending:
            for model in pending:
                self._collect_definition(definitions, model, entity_name, route_path)
            pending = self._unresolved(definitions)

        return Document(
            title=f"{entity_name} API",
            description=f"API documentation for {entity_name}",
            version=version,
            base_path=base_path,
            paths=paths,
            definitions=definitions,
            tags=[entity_tag(entity_name)],
        )

    def _unresolved(self, definitions: Dict[str, Schema]) -> List[type]:
        referenced = self._introspector.drain_references()
        return [model for name, model in referenced.items() if name not in definitions]

    def _collect_definition(
        self,
        definitions: Dict[str, Schema],
        sample: Any,
        entity_name: str,
        route_path: str,
    ) -> None:
        tp = sample_type(sample)
        if tp is None:
            return
        name = type_name(tp)
        if not name or name == entity_name:
            return  # docstring: 匿名类型（list[...] 等）与实体自身不入定义表
        schema = self._introspector.schema_of(tp)
        existing = definitions.get(name)
        if existing is None:
            definitions[name] = schema
        elif existing != schema:
            log_event(
                self._logger,
                logging.WARNING,
                "swagger.definition_collision",
                fields={"definition": name, "route_path": route_path},
            )  # docstring: 同名不同形状，首写者保留


def assemble(
    entity_type: Any,
    base_path: str,
    route_path: str,
    routes: Sequence[RouteDescriptor],
    version: str,
) -> Document:
    return DocumentAssembler().assemble(entity_type, base_path, route_path, routes, version)

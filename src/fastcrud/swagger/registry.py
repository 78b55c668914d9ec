# src/fastcrud/swagger/registry.py

"""
[职责] 文档注册表：按 (route_path, version) 存储单实体文档，提供单文档查询、按版本合并视图与全量合并视图。
[边界] 两阶段生命周期：写阶段（启动期单线程注册）-> freeze 后只读；不做并发写保护。
[上游关系] CrudApp.register_entity 在启动期调用 register；startup 时调用 freeze。
[下游关系] api/routers/swagger.py 读取 get / merged_by_version 输出文档。
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from fastcrud.swagger.models import Document
from fastcrud.utils.constants import (
    DEFAULT_HOST,
    DEFAULT_SCHEMES,
    JSON_CONTENT_TYPE,
    MERGED_ALL_BASE_PATH,
    MERGED_ALL_VERSION,
    MERGED_DESCRIPTION,
    MERGED_TITLE,
    SWAGGER_VERSION,
)
from fastcrud.utils.errors import ConflictError, RegistryFrozenError
from fastcrud.utils.logging_ import get_logger, log_event


RegistryKey = Tuple[str, str]  # docstring: (route_path, version)


def registry_key(route_path: str, version: str) -> str:
    """字符串形式的注册键：{route_path}_{version}。"""
    return f"{route_path}_{version}"


def _merge_into(target: Document, source: Document) -> None:
    """
    [职责] 将 source 折叠进 target：paths 后写覆盖、definitions 首写保留、tags 按 name 去重保留首个。
    [边界] 合并视图持有 source 的深拷贝，修改合并结果不影响已注册文档。
    """
    source = source.model_copy(deep=True)
    for path, item in source.paths.items():
        target.paths[path] = item
    for name, schema in source.definitions.items():
        if name not in target.definitions:
            target.definitions[name] = schema
    seen = {tag.name for tag in target.tags}
    for tag in source.tags:
        if tag.name not in seen:
            target.tags.append(tag)
            seen.add(tag.name)


class DocumentRegistry:
    """
    [职责] 进程内文档存储（显式 freeze 边界）。
    [边界] freeze 后 register 抛 RegistryFrozenError；读操作无锁。
    """

    def __init__(self, *, host: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self._docs: Dict[RegistryKey, Document] = {}  # docstring: 插入顺序即合并顺序
        self._index: Dict[str, RegistryKey] = {}  # docstring: 字符串键 -> (route_path, version)
        self._frozen = False
        self._host = host
        self._logger = logger or get_logger("swagger.registry")

    # --- write phase ---

    def register(self, document: Document, route_path: str, version: str) -> str:
        if self._frozen:
            raise RegistryFrozenError(detail={"route_path": route_path, "version": version})
        key = registry_key(route_path, version)
        owner = self._index.get(key)
        if owner is not None and owner != (route_path, version):
            raise ConflictError(
                message="document registry key collision",
                detail={"key": key, "route_path": route_path, "version": version, "registered_route_path": owner[0]},
            )  # docstring: 如 ("a_b", "v1") 与 ("a", "b_v1") 同键
        self._index[key] = (route_path, version)
        self._docs[(route_path, version)] = document
        log_event(
            self._logger,
            logging.INFO,
            "swagger.register",
            fields={
                "route_path": route_path,
                "version": version,
                "path_count": len(document.paths),
                "definition_count": len(document.definitions),
            },
        )
        return key

    def freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            log_event(
                self._logger,
                logging.INFO,
                "swagger.registry_frozen",
                fields={"document_count": len(self._docs)},
            )

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- read phase ---

    def get(self, key: str) -> Optional[Document]:
        """按字符串键 {route_path}_{version} 查询单实体文档。"""
        entry = self._index.get(key)
        return self._docs.get(entry) if entry is not None else None

    def get_entry(self, route_path: str, version: str) -> Optional[Document]:
        return self._docs.get((route_path, version))

    def keys(self) -> List[str]:
        return [registry_key(route_path, version) for route_path, version in self._docs]

    def versions(self) -> List[str]:
        out: List[str] = []
        for _, version in self._docs:
            if version not in out:
                out.append(version)
        return out

    def __len__(self) -> int:
        return len(self._docs)

    def merged_by_version(self) -> Dict[str, Document]:
        """
        [职责] 按版本折叠所有文档，附加合并文档默认值（swagger 2.0 / http / application/json / /api/{version}）。
        [边界] 每次调用重新计算；不缓存。
        """
        merged: Dict[str, Document] = {}
        for (_, version), document in self._docs.items():
            target = merged.get(version)
            if target is None:
                target = Document(
                    swagger=SWAGGER_VERSION,
                    title=f"{MERGED_TITLE} ({version})",
                    description=f"{MERGED_DESCRIPTION} for version {version}",
                    version=version,
                    host=self._host,
                    base_path=f"/api/{version}",
                    schemes=list(DEFAULT_SCHEMES),
                    consumes=[JSON_CONTENT_TYPE],
                    produces=[JSON_CONTENT_TYPE],
                )
                merged[version] = target
            _merge_into(target, document)
        return merged

    def merged_all(self) -> Document:
        """全量合并（忽略版本）：同一折叠规则，固定 host/basePath 默认值。"""
        target = Document(
            swagger=SWAGGER_VERSION,
            title=MERGED_TITLE,
            description=MERGED_DESCRIPTION,
            version=MERGED_ALL_VERSION,
            host=self._host or DEFAULT_HOST,
            base_path=MERGED_ALL_BASE_PATH,
            schemes=list(DEFAULT_SCHEMES),
            consumes=[JSON_CONTENT_TYPE],
            produces=[JSON_CONTENT_TYPE],
        )
        for document in self._docs.values():
            _merge_into(target, document)
        return target


# src/fastcrud/crud/controller.py

"""
[职责] 通用 CRUD 控制器：对任意实体类型与 ID 表示，提供 create/get/list/update/delete + 批量三件套。
[边界] 每次请求无状态；只负责 body/ID 解码、调用 validator 与 repository、交给 responser 格式化；不绑定 HTTP 框架。
[上游关系] api/routers/crud.py 把 HTTP 请求的原始 path id / body / query 交给本控制器。
[下游关系] CrudRepository 执行存储；validator/repository 的错误原样上抛，由 api/errors.py 映射。
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Type

from pydantic import TypeAdapter, ValidationError

from fastcrud.crud.query import build_query_options
from fastcrud.crud.repository import CrudRepository, EntityT, IdT, QueryOptions
from fastcrud.crud.responser import JsonResponser, Responser
from fastcrud.crud.validator import validate_entity, validation_errors
from fastcrud.schemas.ids import IdKind, Identifier, coerce_identifier, decode_identifier
from fastcrud.swagger.models import RouteDescriptor
from fastcrud.utils.constants import BATCH_PATH, ID_PLACEHOLDER
from fastcrud.utils.errors import BadRequestError, InvalidParameterError, NotFoundError
from fastcrud.utils.logging_ import get_logger, log_event


Body = Any  # docstring: 实体实例 / dict / list / JSON 文本（str 或 bytes）
QueryBuilder = Callable[[Optional[Mapping[str, Any]]], QueryOptions]


class CrudController(Generic[EntityT, IdT]):
    """
    [职责] 单个实体的一组 CRUD 操作（Entity 与 ID 表示由实例化时声明）。
    [边界] ID 解码对 get/update/delete 一致（先 UUID 后 uint64）；批量操作先逐个校验，再进入单一事务。
    """

    def __init__(
        self,
        entity_type: Type[EntityT],
        repository: CrudRepository[EntityT, IdT],
        *,
        id_kind: IdKind = IdKind.INTEGER,
        validator: Optional[Callable[[EntityT], Any]] = None,
        responser: Optional[Responser] = None,
        query_builder: Optional[QueryBuilder] = None,
        id_field: str = "id",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if id_field not in entity_type.model_fields:
            raise ValueError(f"{entity_type.__name__} has no field {id_field!r}")
        self.entity_type = entity_type
        self.repository = repository
        self.id_kind = IdKind(id_kind)
        self.id_field = id_field
        self._validator = validator or validate_entity
        self._responser = responser or JsonResponser()
        self._query_builder = query_builder or build_query_options
        self._list_adapter = TypeAdapter(List[entity_type])  # type: ignore[valid-type]
        self._logger = logger or get_logger("crud.controller")

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    # --- decoding ---

    def decode_entity(self, body: Body) -> EntityT:
        """请求体 -> 实体；无法解码时报 bad_request。"""
        if isinstance(body, self.entity_type):
            return body
        try:
            if isinstance(body, (str, bytes, bytearray)):
                return self.entity_type.model_validate_json(body)
            return self.entity_type.model_validate(body)
        except ValidationError as exc:
            raise BadRequestError(
                message=f"invalid {self.entity_name} body",
                detail={"errors": validation_errors(exc)},
                cause=exc,
            ) from exc

    def decode_entities(self, body: Body) -> List[EntityT]:
        try:
            if isinstance(body, (str, bytes, bytearray)):
                return self._list_adapter.validate_json(body)
            return self._list_adapter.validate_python(body)
        except ValidationError as exc:
            raise BadRequestError(
                message=f"invalid {self.entity_name} list body",
                detail={"errors": validation_errors(exc)},
                cause=exc,
            ) from exc

    def decode_ids(self, body: Body) -> List[Identifier]:
        try:
            if isinstance(body, (str, bytes, bytearray)):
                raw_ids = TypeAdapter(List[Any]).validate_json(body)
            else:
                raw_ids = TypeAdapter(List[Any]).validate_python(body)
        except ValidationError as exc:
            raise BadRequestError(message="invalid id list body", cause=exc) from exc
        return [coerce_identifier(value, self.id_kind) for value in raw_ids]

    def decode_path_id(self, raw_id: Optional[str]) -> Identifier:
        if raw_id is None or str(raw_id) == "":
            raise NotFoundError(message="missing id parameter")
        return decode_identifier(str(raw_id), self.id_kind)

    async def _validate(self, entity: EntityT) -> None:
        result = self._validator(entity)
        if inspect.isawaitable(result):
            await result  # docstring: 允许异步 validator

    # --- single entity ---

    async def create(self, body: Body) -> Dict[str, Any]:
        entity = self.decode_entity(body)
        await self._validate(entity)
        created = await self.repository.create(entity)
        return self._responser.success(created)

    async def get_by_id(self, raw_id: Optional[str]) -> Dict[str, Any]:
        identifier = self.decode_path_id(raw_id)
        entity = await self.repository.find_by_id(identifier.value)
        if entity is None:
            raise NotFoundError(message="record not found", detail={"id": str(identifier)})
        return self._responser.success(entity)

    async def list(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        options = self._query_builder(params)
        items = await self.repository.find(options)
        total = await self.repository.count(options)
        return self._responser.pagination(items, total, options.page, options.page_size)

    async def update(self, raw_id: Optional[str], body: Body) -> Dict[str, Any]:
        identifier = self.decode_path_id(raw_id)
        entity = self.decode_entity(body)
        entity = entity.model_copy(update={self.id_field: identifier.value})  # docstring: 路径 ID 覆盖 body 中的 ID
        await self._validate(entity)
        updated = await self.repository.update(entity)
        return self._responser.success(updated)

    async def delete(self, raw_id: Optional[str]) -> Dict[str, Any]:
        identifier = self.decode_path_id(raw_id)
        await self.repository.delete_by_id(identifier.value)
        return self._responser.success(None)

    # --- batch ---

    async def _run_batch(self, operation: str, size: int, fn: Callable[[CrudRepository], Any]) -> Any:
        fields = {"entity": self.entity_name, "operation": operation, "count": size}
        log_event(self._logger, logging.INFO, "crud.batch.start", fields=fields)
        try:
            return await self.repository.transaction(fn)
        except Exception as exc:
            log_event(
                self._logger,
                logging.WARNING,
                "crud.batch.failed",
                fields={**fields, "error": type(exc).__name__},
            )
            raise

    async def batch_create(self, body: Body) -> Dict[str, Any]:
        entities = self.decode_entities(body)
        if not entities:
            raise InvalidParameterError(message="no entities provided")
        for entity in entities:
            await self._validate(entity)  # docstring: 首个失败即返回，尚未触达存储

        async def _work(tx: CrudRepository[EntityT, IdT]) -> List[EntityT]:
            return await tx.batch_create(entities)

        created = await self._run_batch("batch_create", len(entities), _work)
        return self._responser.success(created)

    async def batch_update(self, body: Body) -> Dict[str, Any]:
        entities = self.decode_entities(body)
        if not entities:
            raise InvalidParameterError(message="no entities provided")
        for entity in entities:
            await self._validate(entity)

        async def _work(tx: CrudRepository[EntityT, IdT]) -> List[EntityT]:
            return await tx.batch_update(entities)

        updated = await self._run_batch("batch_update", len(entities), _work)
        return self._responser.success(updated)

    async def batch_delete(self, body: Body) -> Dict[str, Any]:
        identifiers = self.decode_ids(body)
        if not identifiers:
            raise InvalidParameterError(message="no ids provided")
        values: Sequence[Any] = [identifier.value for identifier in identifiers]

        async def _work(tx: CrudRepository[EntityT, IdT]) -> None:
            await tx.batch_delete(values)

        await self._run_batch("batch_delete", len(values), _work)
        return self._responser.success(None)

    # --- route table ---

    def routes(self) -> List[RouteDescriptor]:
        """本控制器暴露的路由声明（文档与 HTTP 挂载共用）。"""
        name = self.entity_name
        tags = [name]
        id_path = f"/{ID_PLACEHOLDER}"
        list_of = List[self.entity_type]  # type: ignore[valid-type]
        return [
            RouteDescriptor(
                method="GET",
                path=id_path,
                tags=tags,
                summary=f"Get {name} by ID",
                description=f"Get a single {name} by its ID",
                response=self.entity_type,
            ),
            RouteDescriptor(
                method="GET",
                path="",
                tags=tags,
                summary=f"List {name}",
                description=f"Get a paginated list of {name}",
                response=list_of,
            ),
            RouteDescriptor(
                method="POST",
                path="",
                tags=tags,
                summary=f"Create {name}",
                description=f"Create a new {name}",
                request=self.entity_type,
                response=self.entity_type,
            ),
            RouteDescriptor(
                method="PUT",
                path=id_path,
                tags=tags,
                summary=f"Update {name}",
                description=f"Update an existing {name}",
                request=self.entity_type,
                response=self.entity_type,
            ),
            RouteDescriptor(
                method="DELETE",
                path=id_path,
                tags=tags,
                summary=f"Delete {name}",
                description=f"Delete a {name} by its ID",
            ),
            RouteDescriptor(
                method="POST",
                path=BATCH_PATH,
                tags=tags,
                summary=f"Batch create {name}",
                description=f"Create multiple {name} in one transaction",
                request=list_of,
                response=list_of,
            ),
            RouteDescriptor(
                method="PUT",
                path=BATCH_PATH,
                tags=tags,
                summary=f"Batch update {name}",
                description=f"Update multiple {name} in one transaction",
                request=list_of,
                response=list_of,
            ),
            RouteDescriptor(
                method="DELETE",
                path=BATCH_PATH,
                tags=tags,
                summary=f"Batch delete {name}",
                description=f"Delete multiple {name} by IDs in one transaction",
                request=List[str] if self.id_kind is IdKind.UUID else List[int],
            ),
        ]

# src/fastcrud/db/repo/crud_repo.py

"""
[职责] SqlAlchemyCrudRepository：CrudRepository 合同的 async SQLAlchemy 实现（pydantic 实体 <-> ORM 行）。
[边界] 只做单表 CRUD/分页/等值过滤/排序；不做关联加载与软删除；SQLAlchemyError 统一包装为 RepositoryError。
[上游关系] CrudController 通过合同调用；CrudApp.register_entity 可直接以 ORM model 构建本仓储。
[下游关系] AsyncSession（由 sessionmaker 或外部绑定会话提供）。
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy import delete, func, inspect as sa_inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Select

from fastcrud.crud.repository import CrudRepository, EntityT, IdT, QueryOptions, ResultT
from fastcrud.utils.errors import InvalidParameterError, NotFoundError, RepositoryError


_GENERATED_ID_VALUES = (None, 0, "")  # docstring: 视为“未指定 ID”，交给数据库/列默认值生成


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class SqlAlchemyCrudRepository(CrudRepository[EntityT, IdT]):
    """
    [职责] 单实体单表的通用仓储。
    [边界] 未绑定会话时每个操作使用独立会话并自动提交；绑定会话时（transaction 内）只 flush，由外层提交。
    """

    def __init__(
        self,
        entity_type: Type[EntityT],
        orm_model: Type[Any],
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        *,
        session: Optional[AsyncSession] = None,
        id_column: str = "id",
    ) -> None:
        if session_factory is None and session is None:
            raise ValueError("session_factory or session is required")
        self.entity_type = entity_type
        self.orm_model = orm_model
        self._session_factory = session_factory
        self._session = session  # docstring: 绑定会话（transaction 工作单元）
        self._id_column = id_column

        mapper = sa_inspect(orm_model)
        self._columns = {attr.key for attr in mapper.column_attrs}  # docstring: 可写/可过滤的列属性
        self._filter_adapters: Dict[str, TypeAdapter] = {}  # docstring: 过滤值按实体字段注解转换，惰性构建
        if id_column not in self._columns:
            raise ValueError(f"{orm_model.__name__} has no column {id_column!r}")

    def bind(self, session: AsyncSession) -> "SqlAlchemyCrudRepository[EntityT, IdT]":
        """返回绑定到指定会话的同构仓储。"""
        return SqlAlchemyCrudRepository(
            self.entity_type,
            self.orm_model,
            self._session_factory,
            session=session,
            id_column=self._id_column,
        )

    # --- session / error plumbing ---

    @asynccontextmanager
    async def _scope(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            if self._session is not None:
                yield self._session
                return
            assert self._session_factory is not None
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            raise RepositoryError(
                message=f"{operation} failed",
                detail={"entity": self.entity_type.__name__, "operation": operation},
                cause=exc,
            ) from exc

    # --- mapping ---

    def _to_row(self, entity: EntityT) -> Dict[str, Any]:
        row: Dict[str, Any] = {}
        for name in type(entity).model_fields:
            if name in self._columns:
                row[name] = _jsonable(getattr(entity, name))
        if row.get(self._id_column) in _GENERATED_ID_VALUES:
            row.pop(self._id_column, None)
        return row

    def _to_entity(self, obj: Any) -> EntityT:
        data: Dict[str, Any] = {}
        for name, field in self.entity_type.model_fields.items():
            if name in self._columns:
                key = field.validation_alias if isinstance(field.validation_alias, str) else (field.alias or name)
                data[key] = getattr(obj, name)
        return self.entity_type.model_validate(data)

    def _id_attr(self) -> Any:
        return getattr(self.orm_model, self._id_column)

    def _apply_options(self, stmt: Select, options: Optional[QueryOptions]) -> Select:
        if options is None:
            return stmt
        for key, value in options.filters.items():
            if key in self._columns:
                stmt = stmt.where(getattr(self.orm_model, key) == self._filter_value(key, value))  # docstring: 未知列静默忽略
        return stmt

    def _filter_value(self, key: str, value: Any) -> Any:
        """
        [职责] 将查询串里的原始过滤值按实体字段注解转换（"true" -> True，"2" -> 2）。
        [边界] 非实体字段的列原样比较；转换失败报 invalid_parameter。
        """
        field = self.entity_type.model_fields.get(key)
        if field is None:
            return value
        adapter = self._filter_adapters.get(key)
        if adapter is None:
            adapter = self._filter_adapters[key] = TypeAdapter(field.annotation)
        try:
            return _jsonable(adapter.validate_python(value))
        except ValidationError as exc:
            raise InvalidParameterError(
                message="invalid filter value",
                detail={"filter": key, "value": str(value)},
                cause=exc,
            ) from exc

    def _apply_order(self, stmt: Select, order_by: Optional[str]) -> Select:
        key = (order_by or "").strip()
        descending = key.startswith("-")
        key = key.lstrip("-")
        if key in self._columns:
            column = getattr(self.orm_model, key)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        else:
            stmt = stmt.order_by(self._id_attr().asc())  # docstring: 默认按主键稳定分页
        return stmt

    async def _load(self, session: AsyncSession, entity_id: Any) -> Optional[Any]:
        return await session.get(self.orm_model, entity_id)

    async def _insert(self, session: AsyncSession, entities: Sequence[EntityT]) -> List[EntityT]:
        objs = [self.orm_model(**self._to_row(entity)) for entity in entities]
        session.add_all(objs)
        await session.flush()  # docstring: 获取自增 ID 与默认值
        for obj in objs:
            await session.refresh(obj)
        return [self._to_entity(obj) for obj in objs]

    async def _overwrite(self, session: AsyncSession, entity: EntityT) -> EntityT:
        entity_id = getattr(entity, self._id_column)
        obj = await self._load(session, entity_id)
        if obj is None:
            raise NotFoundError(message="record not found", detail={"id": str(entity_id)})
        for key, value in self._to_row(entity).items():
            if key != self._id_column:
                setattr(obj, key, value)
        await session.flush()
        await session.refresh(obj)
        return self._to_entity(obj)

    # --- CrudRepository ---

    async def create(self, entity: EntityT) -> EntityT:
        async with self._scope("create") as session:
            created = await self._insert(session, [entity])
        return created[0]

    async def find_by_id(self, entity_id: IdT) -> Optional[EntityT]:
        async with self._scope("find_by_id") as session:
            obj = await self._load(session, entity_id)
            return self._to_entity(obj) if obj is not None else None

    async def find(self, options: QueryOptions) -> List[EntityT]:
        stmt = self._apply_options(select(self.orm_model), options)
        stmt = self._apply_order(stmt, options.order_by).offset(options.offset).limit(options.page_size)
        async with self._scope("find") as session:
            rows = (await session.scalars(stmt)).all()
            return [self._to_entity(obj) for obj in rows]

    async def count(self, options: Optional[QueryOptions] = None) -> int:
        stmt = self._apply_options(select(func.count()).select_from(self.orm_model), options)
        async with self._scope("count") as session:
            total = await session.scalar(stmt)
        return int(total or 0)

    async def update(self, entity: EntityT) -> EntityT:
        async with self._scope("update") as session:
            return await self._overwrite(session, entity)

    async def delete_by_id(self, entity_id: IdT) -> None:
        async with self._scope("delete_by_id") as session:
            obj = await self._load(session, entity_id)
            if obj is None:
                raise NotFoundError(message="record not found", detail={"id": str(entity_id)})
            await session.delete(obj)
            await session.flush()

    async def batch_create(self, entities: Sequence[EntityT]) -> List[EntityT]:
        async with self._scope("batch_create") as session:
            return await self._insert(session, entities)

    async def batch_update(self, entities: Sequence[EntityT]) -> List[EntityT]:
        async with self._scope("batch_update") as session:
            return [await self._overwrite(session, entity) for entity in entities]

    async def batch_delete(self, entity_ids: Sequence[IdT]) -> None:
        stmt = delete(self.orm_model).where(self._id_attr().in_(list(entity_ids)))
        async with self._scope("batch_delete") as session:
            await session.execute(stmt)
            await session.flush()

    async def transaction(
        self,
        fn: Callable[[CrudRepository[EntityT, IdT]], Awaitable[ResultT]],
    ) -> ResultT:
        """
        [职责] 在单一工作单元内执行 fn：正常返回提交，抛错回滚并原样上抛。
        [边界] 已绑定会话时使用 SAVEPOINT（begin_nested）嵌套。
        """
        try:
            if self._session is not None:
                async with self._session.begin_nested():
                    return await fn(self)
            assert self._session_factory is not None
            async with self._session_factory() as session:
                async with session.begin():
                    return await fn(self.bind(session))
        except SQLAlchemyError as exc:
            raise RepositoryError(
                message="transaction failed",
                detail={"entity": self.entity_type.__name__, "operation": "transaction"},
                cause=exc,
            ) from exc

# src/fastcrud/crud/repository.py

"""
[职责] 通用仓储合同 CrudRepository[Entity, ID]：CRUD + 计数 + 批量 + 事务（单一原子工作单元）。
[边界] 只定义合同与查询选项；不绑定具体存储（SQLAlchemy 实现见 db/repo/crud_repo.py）。
[上游关系] CrudController 通过本合同访问存储。
[下游关系] 具体实现负责持久化，并以 RepositoryError 表达存储失败。
"""

from __future__ import annotations

import abc
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field


EntityT = TypeVar("EntityT", bound=BaseModel)
IdT = TypeVar("IdT")
ResultT = TypeVar("ResultT")


class QueryOptions(BaseModel):
    """
    [职责] 列表查询选项（分页/排序/等值过滤）。
    [边界] order_by 以 "-" 前缀表示降序；filters 仅做等值匹配。
    """

    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)
    order_by: Optional[str] = Field(default=None)
    filters: Dict[str, Any] = Field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class CrudRepository(abc.ABC, Generic[EntityT, IdT]):
    """
    [职责] 存储访问合同。
    [边界] transaction(fn) 将绑定到同一工作单元的仓储句柄交给 fn；fn 正常返回才提交，抛错则回滚并原样上抛。
    """

    @abc.abstractmethod
    async def create(self, entity: EntityT) -> EntityT: ...

    @abc.abstractmethod
    async def find_by_id(self, entity_id: IdT) -> Optional[EntityT]: ...

    @abc.abstractmethod
    async def find(self, options: QueryOptions) -> List[EntityT]: ...

    @abc.abstractmethod
    async def count(self, options: Optional[QueryOptions] = None) -> int: ...

    @abc.abstractmethod
    async def update(self, entity: EntityT) -> EntityT: ...

    @abc.abstractmethod
    async def delete_by_id(self, entity_id: IdT) -> None: ...

    @abc.abstractmethod
    async def batch_create(self, entities: Sequence[EntityT]) -> List[EntityT]: ...

    @abc.abstractmethod
    async def batch_update(self, entities: Sequence[EntityT]) -> List[EntityT]: ...

    @abc.abstractmethod
    async def batch_delete(self, entity_ids: Sequence[IdT]) -> None: ...

    @abc.abstractmethod
    async def transaction(
        self,
        fn: Callable[["CrudRepository[EntityT, IdT]"], Awaitable[ResultT]],
    ) -> ResultT: ...

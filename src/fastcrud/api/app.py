# src/fastcrud/api/app.py

"""
[职责] CrudApp：进程装配入口。注册实体（controller + router + 文档）并构建 FastAPI 应用。
[边界] 注册阶段单线程；build() 之后注册表冻结，不再接受新实体。
[上游关系] 调用方在启动期声明实体、仓储与版本。
[下游关系] FastAPI app：CRUD 路由、/swagger、/health、request-id middleware、DomainError handler。
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence, Type

from fastapi import APIRouter, FastAPI
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fastcrud.api.deps import get_session
from fastcrud.api.errors import domain_error_handler
from fastcrud.api.middleware import RequestContextMiddleware
from fastcrud.api.routers.crud import build_crud_router
from fastcrud.api.routers.health import router as health_router
from fastcrud.api.routers.swagger import build_swagger_router
from fastcrud.config import settings
from fastcrud.crud.controller import CrudController
from fastcrud.crud.repository import CrudRepository
from fastcrud.crud.responser import Responser
from fastcrud.db.engine import init_db
from fastcrud.db.repo.crud_repo import SqlAlchemyCrudRepository
from fastcrud.schemas.ids import IdKind
from fastcrud.swagger.assembler import DocumentAssembler
from fastcrud.swagger.models import RouteDescriptor
from fastcrud.swagger.registry import DocumentRegistry
from fastcrud.utils.errors import DomainError, RegistryFrozenError
from fastcrud.utils.logging_ import configure_logging, get_logger, log_event


class CrudApp:
    """
    [职责] 聚合多个实体的 CRUD 面与文档注册表。
    [边界] 仓储可直接传入，也可由 orm_model + session_factory 构建 SqlAlchemyCrudRepository。
    """

    def __init__(
        self,
        *,
        title: str = "Fast CRUD API",
        api_prefix: Optional[str] = None,
        default_version: Optional[str] = None,
        host: Optional[str] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        engine: Optional[AsyncEngine] = None,
        metadata: Optional[MetaData] = None,
        registry: Optional[DocumentRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        configure_logging()
        self.title = title
        self.api_prefix = "/" + str(api_prefix if api_prefix is not None else settings.FASTCRUD_API_PREFIX).strip("/")
        self.default_version = default_version or settings.FASTCRUD_DEFAULT_VERSION
        self.registry = registry or DocumentRegistry(host=host or settings.FASTCRUD_HOST)
        self.session_factory = session_factory
        self._engine = engine  # docstring: 提供时 startup 执行 create_all
        self._metadata = metadata
        self._assembler = DocumentAssembler()
        self._routers: List[APIRouter] = []
        self._controllers: List[CrudController] = []
        self._logger = logger or get_logger("api.app")

    @property
    def controllers(self) -> List[CrudController]:
        return list(self._controllers)

    def base_path(self, version: str) -> str:
        prefix = "" if self.api_prefix == "/" else self.api_prefix
        return f"{prefix}/{version}"

    def register_entity(
        self,
        entity_type: Type[Any],
        route_path: str,
        repository: Optional[CrudRepository] = None,
        *,
        orm_model: Optional[Type[Any]] = None,
        version: Optional[str] = None,
        id_kind: IdKind = IdKind.INTEGER,
        id_field: str = "id",
        validator: Optional[Callable[[Any], Any]] = None,
        responser: Optional[Responser] = None,
        extra_routes: Sequence[RouteDescriptor] = (),
    ) -> CrudController:
        """
        [职责] 一次注册 = controller + HTTP router + 文档（按 route_path/version 入注册表）。
        [边界] build() 之后调用抛 RegistryFrozenError。
        """
        if self.registry.frozen:
            raise RegistryFrozenError(detail={"route_path": route_path, "version": version or self.default_version})
        version = version or self.default_version
        route_path = route_path.strip("/")

        if repository is None:
            if orm_model is None or self.session_factory is None:
                raise ValueError("repository or (orm_model + session_factory) is required")
            repository = SqlAlchemyCrudRepository(
                entity_type, orm_model, self.session_factory, id_column=id_field
            )

        controller = CrudController(
            entity_type,
            repository,
            id_kind=id_kind,
            validator=validator,
            responser=responser,
            id_field=id_field,
        )

        base_path = self.base_path(version)
        routes = [*controller.routes(), *extra_routes]
        document = self._assembler.assemble(entity_type, base_path, route_path, routes, version)
        self.registry.register(document, route_path, version)

        self._routers.append(build_crud_router(controller, prefix=f"{base_path}/{route_path}"))
        self._controllers.append(controller)
        return controller

    def build(self) -> FastAPI:
        """构建 FastAPI 应用；注册表在此刻冻结。"""
        self.registry.freeze()
        log_event(
            self._logger,
            logging.INFO,
            "api.app.built",
            fields={"entities": len(self._controllers), "versions": self.registry.versions()},
        )

        engine, metadata = self._engine, self._metadata

        @asynccontextmanager
        async def lifespan(_: FastAPI) -> AsyncIterator[None]:
            if engine is not None:
                await init_db(engine=engine, metadata=metadata)  # docstring: 本地/测试建表
            yield

        app = FastAPI(title=self.title, lifespan=lifespan)
        app.state.registry = self.registry
        app.add_middleware(RequestContextMiddleware)
        app.add_exception_handler(DomainError, domain_error_handler)

        for router in self._routers:
            app.include_router(router)
        app.include_router(build_swagger_router(self.registry))
        app.include_router(health_router)

        if self.session_factory is not None:
            factory = self.session_factory

            async def _session_override() -> AsyncIterator[AsyncSession]:
                async with factory() as session:
                    yield session

            app.dependency_overrides[get_session] = _session_override
        return app

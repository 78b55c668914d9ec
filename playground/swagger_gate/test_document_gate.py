# playground/swagger_gate/test_document_gate.py

"""
[职责] swagger gate：锁死 Operation 构建、单实体文档组装与注册表合并/冻结语义。
[边界] 不挂 HTTP；只测 operation/assembler/registry 与 Swagger 2.0 渲染。
[上游关系] fastcrud/swagger/{operation,assembler,registry,models}.py。
[下游关系] /swagger 路由直接输出这些文档。
"""

from __future__ import annotations

import logging
from typing import Any, List

import pytest
from pydantic import BaseModel, create_model

from fastcrud.schemas.scalars import Float64, Uint64
from fastcrud.swagger.assembler import DocumentAssembler, assemble, resolve_path
from fastcrud.swagger.models import RouteDescriptor
from fastcrud.swagger.operation import build_operation
from fastcrud.swagger.registry import DocumentRegistry, registry_key
from fastcrud.utils.errors import ConflictError, RegistryFrozenError


pytestmark = pytest.mark.swagger_gate


class Order(BaseModel):
    id: Uint64 = 0
    amount: Float64 = 0.0
    status: str


class OrderSummary(BaseModel):
    count: int = 0
    total: Float64 = 0.0


class Invoice(BaseModel):
    id: Uint64 = 0
    order_id: Uint64


class TreeNode(BaseModel):
    label: str
    children: List["TreeNode"] = []


class Category(BaseModel):
    id: Uint64 = 0
    tree: TreeNode


def _refs(node: Any) -> List[str]:
    if isinstance(node, dict):
        found = [node["$ref"]] if "$ref" in node else []
        for value in node.values():
            found.extend(_refs(value))
        return found
    if isinstance(node, list):
        return [ref for value in node for ref in _refs(value)]
    return []


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _order_routes() -> List[RouteDescriptor]:
    return [
        RouteDescriptor(method="GET", path="/:id", response=Order),
        RouteDescriptor(method="GET", path="", response=List[Order]),
        RouteDescriptor(method="POST", path="", request=Order, response=Order),
        RouteDescriptor(method="put", path="/:id", request=Order(status="x"), response=Order),
        RouteDescriptor(method="DELETE", path="/:id"),
        RouteDescriptor(method="GET", path="/summary", response=OrderSummary),
    ]


def _silent_logger() -> logging.Logger:
    logger = logging.getLogger("swagger_gate.silent")
    logger.propagate = False
    return logger


# -----------------------------
# operation.py
# -----------------------------


def test_operation_for_id_route_has_path_param_first() -> None:
    op = build_operation(RouteDescriptor(method="PUT", path="/:id", request=Order, response=Order), "Order")
    rendered = op.to_swagger()

    params = rendered["parameters"]
    assert params[0] == {
        "name": "id",
        "in": "path",
        "required": True,
        "description": "Entity ID",
        "type": "integer",
    }
    assert params[1]["name"] == "body"
    assert params[1]["in"] == "body"
    assert params[1]["description"] == "Request body"
    assert params[1]["schema"]["type"] == "object"
    assert rendered["responses"]["200"]["description"] == "Success"


def test_post_without_request_sample_references_entity() -> None:
    op = build_operation(RouteDescriptor(method="POST", path=""), "Order")
    body = op.to_swagger()["parameters"][0]
    assert body["schema"] == {"$ref": "#/definitions/Order"}
    assert op.responses == {}


def test_get_without_samples_has_no_parameters() -> None:
    rendered = build_operation(RouteDescriptor(method="GET", path=""), "Order").to_swagger()
    assert "parameters" not in rendered
    assert rendered["responses"] == {}


def test_list_response_is_array_of_entity() -> None:
    op = build_operation(RouteDescriptor(method="GET", path="", response=List[Order]), "Order")
    schema = op.responses[200].schema_
    assert schema is not None and schema.kind == "array"
    assert schema.items is not None and set(schema.items.properties or {}) == {"id", "amount", "status"}


# -----------------------------
# assembler.py
# -----------------------------


def test_resolve_path_substitutes_id_once() -> None:
    assert resolve_path("orders", "/:id") == "/orders/{id}"
    assert resolve_path("orders", "/{id}") == "/orders/{id}"
    assert resolve_path("orders", "") == "/orders"
    assert resolve_path("/orders/", "/batch") == "/orders/batch"


def test_assemble_groups_paths_and_collects_definitions() -> None:
    doc = assemble(Order, "/api/v1", "orders", _order_routes(), "v1")

    assert doc.title == "Order API"
    assert doc.description == "API documentation for Order"
    assert doc.base_path == "/api/v1"
    assert doc.version == "v1"
    assert list(doc.paths) == ["/orders/{id}", "/orders", "/orders/summary"]
    assert set(doc.paths["/orders/{id}"].operations()) == {"get", "put", "delete"}
    assert set(doc.paths["/orders"].operations()) == {"get", "post"}
    assert set(doc.definitions) == {"Order", "OrderSummary"}
    assert [tag.to_swagger() for tag in doc.tags] == [{"name": "Order", "description": "Operations about Order"}]

    rendered = doc.to_swagger()
    assert rendered["basePath"] == "/api/v1"
    assert rendered["info"] == {"title": "Order API", "version": "v1", "description": "API documentation for Order"}
    assert "swagger" not in rendered  # per-entity documents carry no format version


def test_same_method_same_path_last_writer_wins() -> None:
    routes = [
        RouteDescriptor(method="GET", path="", summary="first"),
        RouteDescriptor(method="GET", path="", summary="second"),
    ]
    doc = assemble(Order, "/api/v1", "orders", routes, "v1")
    assert doc.paths["/orders"].get is not None
    assert doc.paths["/orders"].get.summary == "second"


def test_definition_name_collision_keeps_first_and_warns() -> None:
    first = create_model("Summary", count=(int, ...))
    second = create_model("Summary", label=(str, ...))

    logger = logging.getLogger("swagger_gate.collision")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        assembler = DocumentAssembler(logger=logger)
        routes = [
            RouteDescriptor(method="GET", path="/a", response=first),
            RouteDescriptor(method="GET", path="/b", response=second),
        ]
        doc = assembler.assemble(Order, "/api/v1", "orders", routes, "v1")
    finally:
        logger.removeHandler(handler)

    assert set((doc.definitions["Summary"].properties or {})) == {"count"}
    messages = [r.getMessage() for r in handler.records]
    assert messages == ["swagger.definition_collision"]
    assert getattr(handler.records[0], "definition") == "Summary"


def test_cyclic_child_model_gets_its_own_definition() -> None:
    routes = [
        RouteDescriptor(method="GET", path="/:id", response=Category),
        RouteDescriptor(method="GET", path="/trees", response=List[TreeNode]),
    ]
    rendered = assemble(Category, "/api/v1", "categories", routes, "v1").to_swagger()

    definitions = rendered["definitions"]
    assert set(definitions) == {"Category", "TreeNode"}
    refs = _refs(rendered)
    assert refs
    assert all(ref.rsplit("/", 1)[-1] in definitions for ref in refs)
    children = definitions["TreeNode"]["properties"]["children"]
    assert children == {"type": "array", "items": {"$ref": "#/definitions/TreeNode"}}


def test_reused_assembler_does_not_leak_references_between_entities() -> None:
    assembler = DocumentAssembler(logger=_silent_logger())
    assembler.assemble(Category, "/api/v1", "categories", [], "v1")
    doc = assembler.assemble(Order, "/api/v1", "orders", [], "v1")
    assert set(doc.definitions) == {"Order"}


# -----------------------------
# registry.py
# -----------------------------


def test_order_registered_at_orders_v1_merges_under_api_v1() -> None:
    registry = DocumentRegistry(logger=_silent_logger())
    key = registry.register(assemble(Order, "/api/v1", "orders", _order_routes(), "v1"), "orders", "v1")

    assert key == registry_key("orders", "v1") == "orders_v1"
    assert registry.get("orders_v1") is registry.get_entry("orders", "v1")
    assert registry.get("orders_v2") is None

    merged = registry.merged_by_version()
    assert list(merged) == ["v1"]
    v1 = merged["v1"]
    assert v1.base_path == "/api/v1"
    assert {"/orders", "/orders/{id}"} <= set(v1.paths)

    rendered = v1.to_swagger()
    assert rendered["swagger"] == "2.0"
    assert rendered["info"]["title"] == "Fast CRUD API (v1)"
    assert rendered["info"]["description"] == "Auto-generated API documentation for version v1"
    assert rendered["schemes"] == ["http"]
    assert rendered["consumes"] == ["application/json"]
    assert rendered["produces"] == ["application/json"]


def test_merge_is_union_of_paths_and_definitions() -> None:
    registry = DocumentRegistry(logger=_silent_logger())
    registry.register(assemble(Order, "/api/v1", "orders", _order_routes(), "v1"), "orders", "v1")
    invoice_routes = [RouteDescriptor(method="GET", path="/:id", response=Invoice)]
    registry.register(assemble(Invoice, "/api/v1", "invoices", invoice_routes, "v1"), "invoices", "v1")
    registry.register(assemble(Order, "/api/v2", "orders", _order_routes()[:1], "v2"), "orders", "v2")

    merged = registry.merged_by_version()
    assert list(merged) == ["v1", "v2"]
    v1 = merged["v1"]
    assert {"/orders", "/orders/{id}", "/orders/summary", "/invoices/{id}"} == set(v1.paths)
    assert {"Order", "OrderSummary", "Invoice"} == set(v1.definitions)
    assert [tag.name for tag in v1.tags] == ["Order", "Invoice"]
    assert merged["v2"].base_path == "/api/v2"
    assert set(merged["v2"].paths) == {"/orders/{id}"}

    everything = registry.merged_all()
    assert everything.title == "Fast CRUD API"
    assert everything.version == "1.0"
    assert everything.host == "localhost:8080"
    assert everything.base_path == "/api/v1"
    assert [tag.name for tag in everything.tags] == ["Order", "Invoice"]  # deduplicated across versions
    assert registry.versions() == ["v1", "v2"]
    assert registry.keys() == ["orders_v1", "invoices_v1", "orders_v2"]


def test_merged_definitions_first_writer_wins() -> None:
    first = create_model("Order", id=(int, 0), status=(str, ...))
    registry = DocumentRegistry(logger=_silent_logger())
    registry.register(assemble(Order, "/api/v1", "orders", [], "v1"), "orders", "v1")
    registry.register(assemble(first, "/api/v1", "legacy", [], "v1"), "legacy", "v1")

    merged = registry.merged_by_version()["v1"]
    assert set(merged.definitions["Order"].properties or {}) == {"id", "amount", "status"}


def test_registry_freeze_rejects_writes() -> None:
    registry = DocumentRegistry(logger=_silent_logger())
    registry.register(assemble(Order, "/api/v1", "orders", [], "v1"), "orders", "v1")
    registry.freeze()
    assert registry.frozen is True

    with pytest.raises(RegistryFrozenError) as exc_info:
        registry.register(assemble(Invoice, "/api/v1", "invoices", [], "v1"), "invoices", "v1")
    assert exc_info.value.http_status == 409
    assert len(registry) == 1
    assert registry.get("orders_v1") is not None  # reads still served


def test_registry_rejects_ambiguous_string_keys() -> None:
    registry = DocumentRegistry(logger=_silent_logger())
    registry.register(assemble(Order, "/api/v1", "a_b", [], "v1"), "a_b", "v1")

    with pytest.raises(ConflictError) as exc_info:
        registry.register(assemble(Invoice, "/api/b_v1", "a", [], "b_v1"), "a", "b_v1")
    assert exc_info.value.detail["key"] == "a_b_v1"
    assert exc_info.value.http_status == 409
    assert registry.get("a_b_v1") is registry.get_entry("a_b", "v1")
    assert registry.get_entry("a", "b_v1") is None

    replacement = assemble(Order, "/api/v1", "a_b", _order_routes(), "v1")
    registry.register(replacement, "a_b", "v1")  # same (route, version) replaces its document
    assert registry.get("a_b_v1") is replacement
    assert len(registry) == 1


def test_mutating_merged_views_leaves_registered_documents_intact() -> None:
    registry = DocumentRegistry(logger=_silent_logger())
    registry.register(assemble(Order, "/api/v1", "orders", _order_routes(), "v1"), "orders", "v1")
    registry.freeze()

    merged = registry.merged_by_version()["v1"]
    merged.paths["/orders/{id}"].get = None
    merged.definitions["Order"].properties = {}
    merged.tags[0].description = "changed"
    registry.merged_all().paths.clear()

    stored = registry.get("orders_v1")
    assert stored is not None
    assert stored.paths["/orders/{id}"].get is not None
    assert set(stored.definitions["Order"].properties or {}) == {"id", "amount", "status"}
    assert stored.tags[0].description == "Operations about Order"
    fresh = registry.merged_by_version()["v1"]
    assert fresh.paths["/orders/{id}"].get is not None

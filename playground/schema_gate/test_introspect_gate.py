# playground/schema_gate/test_introspect_gate.py

"""
[职责] introspect gate：锁死类型 -> Schema 推导（原始类型表、embedded 平铺、required 去重、别名/排除、环检测）。
[边界] 只测 TypeIntrospector；不做文档组装。
[上游关系] fastcrud/swagger/introspect.py + fastcrud/schemas/scalars.py。
[下游关系] operation/assembler 产出的 definitions 与参数 schema 依赖本推导。
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import pytest
from pydantic import BaseModel, Field

from fastcrud.schemas.scalars import Float32, Float64, Int8, Int64, Uint, Uint32, Uint64
from fastcrud.swagger.introspect import TypeIntrospector, resolve_field_name, schema_of, type_name


pytestmark = pytest.mark.schema_gate


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class User(BaseModel):
    id: Uint64 = Field(default=0, alias="id")
    name: str


class Timestamps(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class Audit(BaseModel):
    created_by: str = ""
    secret: str = Field(default="", exclude=True)


class Account(Timestamps, Audit):
    email: str = Field(..., description="login email", examples=["a@example.com"])
    nickname: str = Field(default="", alias="nick,omitempty")


class Named(BaseModel):
    name: str


class Renamed(Named):
    name: str  # redeclared, still required


class Optionalized(Named):
    name: str = "anon"  # redeclared with a default


class Address(BaseModel):
    city: str
    zip_code: Optional[str] = None


class Customer(BaseModel):
    address: Address
    previous: List[Address] = Field(default_factory=list)


class Node(BaseModel):
    label: str
    children: List["Node"] = Field(default_factory=list)


class Scalars(BaseModel):
    flag: bool = False
    plain_int: int = 0
    tiny: Int8 = 0
    wide: Int64 = 0
    unsigned: Uint = 0
    u32: Uint32 = 0
    u64: Uint64 = 0
    ratio: float = 0.0
    single: Float32 = 0.0
    double: Float64 = 0.0
    text: str = ""
    when: Optional[datetime] = None
    day: Optional[date] = None
    uid: Optional[UUID] = None
    amount: Decimal = Decimal("0")
    color: Color = Color.RED
    tags: List[str] = Field(default_factory=list)
    pair: Tuple[int, str] = (0, "")
    extra: Dict[str, Any] = Field(default_factory=dict)


def test_user_scenario_schema() -> None:
    schema = schema_of(User)
    assert schema.to_swagger() == {
        "type": "object",
        "properties": {
            "id": {"type": "integer", "format": "int64"},
            "name": {"type": "string"},
        },
        "required": ["name"],
    }


def test_primitive_table() -> None:
    props = schema_of(Scalars).properties or {}
    shapes = {name: (prop.kind, prop.format) for name, prop in props.items()}

    assert shapes["flag"] == ("boolean", None)
    assert shapes["plain_int"] == ("integer", None)
    assert shapes["tiny"] == ("integer", None)
    assert shapes["wide"] == ("integer", "int64")
    assert shapes["unsigned"] == ("integer", None)
    assert shapes["u32"] == ("integer", None)
    assert shapes["u64"] == ("integer", "int64")
    assert shapes["ratio"] == ("number", "double")
    assert shapes["single"] == ("number", None)
    assert shapes["double"] == ("number", "double")
    assert shapes["text"] == ("string", None)
    assert shapes["when"] == ("string", "date-time")
    assert shapes["day"] == ("string", "date")
    assert shapes["uid"] == ("string", "uuid")
    assert shapes["amount"] == ("number", None)
    assert shapes["color"] == ("string", None)
    assert shapes["extra"] == ("object", None)

    assert props["tags"].kind == "array"
    assert props["tags"].items is not None and props["tags"].items.kind == "string"
    assert props["pair"].items is not None and props["pair"].items.kind == "integer"


def test_direct_primitives_and_sequences() -> None:
    assert schema_of(bool).kind == "boolean"
    assert schema_of(Optional[int]).kind == "integer"
    assert schema_of(List[User]).items == schema_of(User)
    assert schema_of(list).items is not None and schema_of(list).items.kind == "object"
    assert schema_of(Optional[List[Int64]]).items.format == "int64"  # type: ignore[union-attr]


def test_unsupported_composites_fall_back_to_object() -> None:
    assert schema_of(Dict[str, int]).to_swagger() == {"type": "object"}
    assert schema_of(Any).to_swagger() == {"type": "object"}

    class Plain:
        pass

    assert schema_of(Plain).to_swagger() == {"type": "object"}


def test_embedded_fields_are_spliced_into_parent() -> None:
    schema = schema_of(Account)
    props = schema.properties or {}

    assert set(props) == {"created_at", "updated_at", "created_by", "email", "nick"}
    assert "Timestamps" not in props and "Audit" not in props
    assert "secret" not in props  # excluded field
    assert props["nick"].kind == "string"  # portion before first comma
    assert props["email"].description == "login email"
    assert props["email"].example == "a@example.com"
    assert schema.required == ["created_at", "email"]


def test_required_names_are_not_duplicated() -> None:
    assert schema_of(Renamed).required == ["name"]
    assert schema_of(Optionalized).required == []


def test_nested_models_are_inlined() -> None:
    props = schema_of(Customer).properties or {}
    address = props["address"]
    assert address.kind == "object"
    assert address.ref is None
    assert set(address.properties or {}) == {"city", "zip_code"}
    assert address.required == ["city"]
    assert props["previous"].items == address


def test_self_reference_emits_ref() -> None:
    schema = schema_of(Node)
    children = (schema.properties or {})["children"]
    assert children.kind == "array"
    assert children.items is not None
    assert children.items.to_swagger() == {"$ref": "#/definitions/Node"}


def test_introspector_instance_is_reusable() -> None:
    introspector = TypeIntrospector()
    first = introspector.schema_of(Node)
    second = introspector.schema_of(Node)
    assert first == second


def test_referenced_models_are_recorded_once_and_drained() -> None:
    introspector = TypeIntrospector()
    introspector.schema_of(Customer)
    assert introspector.drain_references() == {}  # acyclic nesting stays inline

    introspector.schema_of(Node)
    assert introspector.drain_references() == {"Node": Node}
    assert introspector.drain_references() == {}


def test_type_name_and_field_names() -> None:
    assert type_name(User) == "User"
    assert type_name(Optional[User]) == "User"
    assert type_name(List[User]) is None
    assert resolve_field_name("nickname", Account.model_fields["nickname"]) == "nick"
    assert resolve_field_name("email", Account.model_fields["email"]) == "email"

# src/fastcrud/swagger/introspect.py

"""
[职责] 类型 -> Schema 推导：递归遍历 pydantic 模型/序列/可选/定宽标量注解，产出内联的结构化 Schema。
[边界] 不做文档组装与定义收集；不读取实例数据；未知复合类型回退为 {type: object}，从不抛错。
[上游关系] operation builder / assembler 传入实体类型、请求/响应样本类型。
[下游关系] Schema 进入 Operation.parameters/responses 与 Document.definitions。
"""

from __future__ import annotations

import inspect
import types
from collections import abc
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple, Union, get_args, get_origin
from uuid import UUID

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from fastcrud.schemas.scalars import FloatKind, IntKind
from fastcrud.swagger.models import Schema


_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
    abc.Collection,
    abc.Iterable,
)  # docstring: 视为数组的容器（slice/array 对应物）

_UNION_ORIGINS = (Union, types.UnionType)

_SKIP_NAME = "-"  # docstring: alias="-" 等价 json:"-"


def _is_model(tp: Any) -> bool:
    if get_origin(tp) is not None or not isinstance(tp, type):
        return False
    return issubclass(tp, BaseModel) and tp is not BaseModel


def sample_type(sample: Any) -> Any:
    """
    [职责] 将路由样本解析为待推导的类型：类型/泛型别名原样返回，实例取其类型。
    [边界] None 表示无样本。
    """
    if sample is None:
        return None
    if isinstance(sample, type) or get_origin(sample) is not None:
        return sample
    return type(sample)


def type_name(tp: Any) -> Optional[str]:
    """
    [职责] 解析类型的定义名（剥离 Annotated/Optional）；序列等匿名类型返回 None。
    [边界] 不做包名限定。
    """
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin in _UNION_ORIGINS:
            members = [a for a in get_args(tp) if a is not type(None)]
            if len(members) != 1:
                return None
            tp = members[0]
            continue
        break
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return None


def _own_field_names(model: type[BaseModel]) -> set:
    """模型自身声明（非继承）的字段名。"""
    try:
        own = set(inspect.get_annotations(model))
    except NameError:
        inherited = set()
        for base in model.__bases__:
            if _is_model(base):
                inherited.update(base.model_fields)
        own = set(model.model_fields) - inherited  # docstring: 注解无法求值时退化为“非继承字段”
    return own & set(model.model_fields)


def resolve_field_name(attr: str, field: FieldInfo) -> str:
    """
    [职责] 解析字段对外名：serialization_alias > alias > 属性名；取第一个逗号之前的部分。
    """
    alias = field.serialization_alias or field.alias
    if isinstance(alias, str) and alias:
        name = alias.split(",")[0].strip()
        if name:
            return name
    return attr


class TypeIntrospector:
    """
    [职责] 递归 Schema 推导器；内部维护模型访问栈用于环检测（环上的模型输出 $ref）。
    [边界] 非线程共享：每次 schema_of 调用独立使用；嵌套模型始终内联。
    """

    def __init__(self) -> None:
        self._stack: List[type] = []  # docstring: 当前递归路径上的模型
        self._referenced: Dict[str, type] = {}  # docstring: 以 $ref 输出过的模型（定义名 -> 类型），待组装方补齐定义

    def schema_of(self, tp: Any) -> Schema:
        return self._describe(tp, ())

    def drain_references(self) -> Dict[str, type]:
        """取出并清空自上次调用以来输出过 $ref 的模型。"""
        referenced, self._referenced = self._referenced, {}
        return referenced

    # --- dispatch ---

    def _describe(self, tp: Any, metadata: Tuple[Any, ...]) -> Schema:
        origin = get_origin(tp)

        if origin is Annotated:
            base, *extra = get_args(tp)
            return self._describe(base, tuple(metadata) + tuple(extra))  # docstring: 合并 Annotated 元数据

        scalar = _scalar_schema(tp, metadata)
        if scalar is not None:
            return scalar

        if origin in _UNION_ORIGINS:
            members = [a for a in get_args(tp) if a is not type(None)]
            if len(members) == 1:
                return self._describe(members[0], metadata)  # docstring: Optional[T] 视为指针，下钻
            return Schema(kind="object")  # docstring: 多成员 union 无法确定形状

        if origin in _SEQUENCE_ORIGINS or (origin is None and tp in (list, tuple, set, frozenset)):
            return Schema(kind="array", items=self._describe(_element_type(tp), ()))

        if _is_model(tp):
            return self._describe_model(tp)

        return Schema(kind="object")  # docstring: 非模型非序列的兜底

    # --- models ---

    def _describe_model(self, model: type[BaseModel]) -> Schema:
        if model in self._stack:
            self._referenced.setdefault(model.__name__, model)
            return Schema.reference(model.__name__)  # docstring: 自引用/环引用改为 $ref
        self._stack.append(model)
        try:
            properties: Dict[str, Schema] = {}
            required: List[str] = []

            # embedded: 基类属性平铺到父级；最左基类最后写入（与 pydantic 字段覆盖顺序一致）
            for base in reversed(model.__bases__):
                if not _is_model(base):
                    continue
                embedded = self._describe_model(base)
                for name, prop in (embedded.properties or {}).items():
                    properties[name] = prop
                    _mark_required(required, name, name in embedded.required)

            own = _own_field_names(model)
            for attr, field in model.model_fields.items():
                if attr not in own:
                    continue
                if field.exclude is True:
                    continue  # docstring: json:"-"
                name = resolve_field_name(attr, field)
                if name == _SKIP_NAME:
                    continue
                properties[name] = self._describe_field(field)
                _mark_required(required, name, field.is_required())

            return Schema(kind="object", properties=properties, required=required)
        finally:
            self._stack.pop()

    def _describe_field(self, field: FieldInfo) -> Schema:
        schema = self._describe(field.annotation, tuple(field.metadata))
        update: Dict[str, Any] = {}
        if field.description:
            update["description"] = field.description
        if field.examples:
            update["example"] = field.examples[0]
        return schema.model_copy(update=update) if update else schema


def _mark_required(required: List[str], name: str, is_required: bool) -> None:
    """后写者决定 name 是否必填；保证 required 无重复。"""
    if is_required:
        if name not in required:
            required.append(name)
    elif name in required:
        required.remove(name)


def _element_type(tp: Any) -> Any:
    args = get_args(tp)
    if not args or args[0] is Ellipsis:
        return Any
    return args[0]  # docstring: tuple[A, B] 取首元素类型


def _scalar_schema(tp: Any, metadata: Sequence[Any]) -> Optional[Schema]:
    """
    [职责] 固定原始类型映射表（bool/int/float/str/datetime 及定宽标记）。
    [边界] 非原始类型返回 None 交由上层处理。
    """
    if get_origin(tp) is not None or not isinstance(tp, type):
        return None

    if issubclass(tp, Enum):
        if issubclass(tp, str):
            return Schema(kind="string")
        if issubclass(tp, int):
            return Schema(kind="integer")
        return None

    if tp is bool:
        return Schema(kind="boolean")

    if issubclass(tp, int):
        int_kind = next((m for m in metadata if isinstance(m, IntKind)), None)
        return Schema(kind="integer", format=int_kind.format if int_kind is not None else None)

    if issubclass(tp, float):
        float_kind = next((m for m in metadata if isinstance(m, FloatKind)), FloatKind(64))
        return Schema(kind="number", format=float_kind.format)  # docstring: Python float 即双精度

    if issubclass(tp, Decimal):
        return Schema(kind="number")
    if issubclass(tp, str):
        return Schema(kind="string")
    if issubclass(tp, datetime):
        return Schema(kind="string", format="date-time")  # docstring: 时间类型特判，不按结构体展开
    if issubclass(tp, date):
        return Schema(kind="string", format="date")
    if issubclass(tp, time):
        return Schema(kind="string", format="time")
    if issubclass(tp, UUID):
        return Schema(kind="string", format="uuid")
    if issubclass(tp, (bytes, bytearray)):
        return Schema(kind="string", format="byte")
    return None


def schema_of(tp: Any) -> Schema:
    """Module-level shortcut: fresh TypeIntrospector per call."""
    return TypeIntrospector().schema_of(tp)

# src/fastcrud/schemas/scalars.py

"""
[职责] 定宽数值标量契约：用 Annotated 元数据标记整数/浮点位宽与符号，供实体字段声明与 schema 推导复用。
[边界] 仅提供类型别名与标记对象；范围校验交给 pydantic Field 约束；不做 schema 生成。
[上游关系] 实体模型（pydantic BaseModel）在字段注解中引用 Int64/Uint32/Float32 等。
[下游关系] swagger/introspect.py 读取 IntKind/FloatKind 决定 integer/number 与 format。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from pydantic import Field
from pydantic.fields import FieldInfo


@dataclass(frozen=True)
class IntKind:
    """整数位宽标记（bits=0 表示平台 int/uint）。"""

    bits: int = 0
    signed: bool = True

    @property
    def format(self) -> str | None:
        return "int64" if self.bits == 64 else None  # docstring: 仅 64 位变体带 format


@dataclass(frozen=True)
class FloatKind:
    """浮点位宽标记。"""

    bits: int = 64

    @property
    def format(self) -> str | None:
        return "double" if self.bits == 64 else None  # docstring: 仅双精度带 format


def _signed_range(bits: int) -> FieldInfo:
    bound = 2 ** (bits - 1)
    return Field(ge=-bound, le=bound - 1)


def _unsigned_range(bits: int) -> FieldInfo:
    return Field(ge=0, le=2**bits - 1)


UINT64_MAX = 2**64 - 1  # docstring: 无符号 64 位上限（ID 解码复用）

Int = Annotated[int, IntKind(0, True)]
Int8 = Annotated[int, IntKind(8, True), _signed_range(8)]
Int16 = Annotated[int, IntKind(16, True), _signed_range(16)]
Int32 = Annotated[int, IntKind(32, True), _signed_range(32)]
Int64 = Annotated[int, IntKind(64, True), _signed_range(64)]

Uint = Annotated[int, IntKind(0, False), Field(ge=0)]
Uint8 = Annotated[int, IntKind(8, False), _unsigned_range(8)]
Uint16 = Annotated[int, IntKind(16, False), _unsigned_range(16)]
Uint32 = Annotated[int, IntKind(32, False), _unsigned_range(32)]
Uint64 = Annotated[int, IntKind(64, False), _unsigned_range(64)]

Float32 = Annotated[float, FloatKind(32)]
Float64 = Annotated[float, FloatKind(64)]

__all__ = [
    "IntKind",
    "FloatKind",
    "UINT64_MAX",
    "Int",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "Float32",
    "Float64",
]

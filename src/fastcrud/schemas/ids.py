# src/fastcrud/schemas/ids.py

"""
[职责] ID 契约层：定义通用实体 ID 的两种具体表示（无符号 64 位整数 / UUID）与按声明表示的解码规则。
[边界] 不依赖 ORM 与 HTTP；不做实体查询；仅做解析与类型裁决。
[上游关系] crud controller 从路径参数/批量请求体读取原始 ID 后调用。
[下游关系] repository 接收 Identifier.value（int 或 UUID）执行查询。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from fastcrud.schemas.scalars import UINT64_MAX
from fastcrud.utils.errors import InvalidParameterError


_UINT_PATTERN = re.compile(r"[0-9]+")  # docstring: 仅 ASCII 数字（拒绝 +/-/空白/下划线/换行），配合 fullmatch


class IdKind(str, Enum):
    """控制器实例声明的 ID 表示。"""

    INTEGER = "integer"
    UUID = "uuid"


@dataclass(frozen=True)
class IntegerId:
    value: int

    kind = IdKind.INTEGER

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UuidId:
    value: UUID

    kind = IdKind.UUID

    def __str__(self) -> str:
        return str(self.value)


Identifier = Union[IntegerId, UuidId]  # docstring: 通用 ID 的和类型


def new_uuid() -> UUID:
    """Generate UUID v4."""  # docstring: UUID 实体默认 ID 生成策略
    return uuid4()


def parse_uuid(raw: str) -> Optional[UUID]:
    """Return UUID if raw parses, else None."""
    try:
        return UUID(str(raw))
    except (ValueError, AttributeError, TypeError):
        return None


def parse_uint64(raw: str) -> Optional[int]:
    """Return unsigned 64-bit int if raw is a plain decimal within range, else None."""
    text = str(raw)
    if not _UINT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value > UINT64_MAX:
        return None  # docstring: 超出 uint64 视为不可解析
    return value


def decode_identifier(raw: str, kind: IdKind) -> Identifier:
    """
    [职责] 将路径中的原始 ID 字符串解码为控制器声明的表示。
    [边界] 先尝试 UUID，再尝试 uint64；可解析但表示不符时报 invalid_parameter（不是 not_found）。
    [上游关系] CrudController.get_by_id/update/delete 调用。
    [下游关系] repository.find_by_id/update/delete_by_id 使用 Identifier.value。
    """
    kind = IdKind(kind)  # docstring: 允许传入 "integer"/"uuid" 字符串
    uuid_value = parse_uuid(raw)
    if uuid_value is not None:
        if kind is IdKind.UUID:
            return UuidId(uuid_value)
        raise InvalidParameterError(
            message="invalid id parameter type",
            detail={"id": str(raw), "expected": kind.value, "got": IdKind.UUID.value},
        )  # docstring: UUID 形态但声明为整数

    int_value = parse_uint64(raw)
    if int_value is not None:
        if kind is IdKind.INTEGER:
            return IntegerId(int_value)
        raise InvalidParameterError(
            message="invalid id parameter type",
            detail={"id": str(raw), "expected": kind.value, "got": IdKind.INTEGER.value},
        )  # docstring: 整数形态但声明为 UUID

    raise InvalidParameterError(message="invalid id parameter", detail={"id": str(raw)})


def coerce_identifier(value: Any, kind: IdKind) -> Identifier:
    """
    [职责] 将批量请求体中的 JSON 值（int 或 str）解码为 Identifier。
    [边界] bool/float/对象一律拒绝；int 需落在 uint64 范围且声明为整数。
    """
    kind = IdKind(kind)
    if isinstance(value, bool):
        raise InvalidParameterError(message="invalid id parameter", detail={"id": str(value)})
    if isinstance(value, int):
        if 0 <= value <= UINT64_MAX:
            if kind is IdKind.INTEGER:
                return IntegerId(value)
            raise InvalidParameterError(
                message="invalid id parameter type",
                detail={"id": str(value), "expected": kind.value, "got": IdKind.INTEGER.value},
            )
        raise InvalidParameterError(message="invalid id parameter", detail={"id": str(value)})
    if isinstance(value, UUID):
        value = str(value)
    if isinstance(value, str):
        return decode_identifier(value, kind)
    raise InvalidParameterError(message="invalid id parameter", detail={"id": repr(value)})

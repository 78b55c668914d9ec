# src/fastcrud/crud/validator.py

"""
[职责] 默认实体校验协作方：用实体自身的 pydantic 约束重新校验（含 model/field validators）。
[边界] 失败抛 EntityValidationError（detail.errors 为逐字段错误）；不做持久化层唯一性校验。
[上游关系] CrudController.create/update/batch_* 调用。
[下游关系] controller 原样透传本模块抛出的错误。
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from pydantic import BaseModel, ValidationError

from fastcrud.utils.errors import EntityValidationError


Validator = Callable[[BaseModel], None]


def validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """pydantic 错误 -> JSON-safe 列表（loc/msg/type）。"""
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        }
        for err in exc.errors()
    ]


def _validation_input(entity: BaseModel) -> Dict[str, Any]:
    """按字段的输入别名回填当前属性值（含 exclude 字段，不经序列化）。"""
    data: Dict[str, Any] = {}
    for name, field in type(entity).model_fields.items():
        key = field.validation_alias if isinstance(field.validation_alias, str) else (field.alias or name)
        data[key] = getattr(entity, name)
    return data


def validate_entity(entity: BaseModel) -> None:
    """重新跑实体的字段约束与 validators；属性被直接改写后同样生效。"""
    try:
        type(entity).model_validate(_validation_input(entity))
    except ValidationError as exc:
        raise EntityValidationError(
            message=f"{type(entity).__name__} validation failed",
            detail={"errors": validation_errors(exc)},
            cause=exc,
        ) from exc

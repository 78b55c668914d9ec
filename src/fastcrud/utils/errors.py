# src/fastcrud/utils/errors.py

"""
[职责] 统一领域错误合同（error_code/message/detail/cause）与最小 HTTP 映射策略（http_status/retryable）。
[边界] 不依赖 FastAPI/HTTPException；仅提供通用错误壳与校验；kind 即 error_code。
[上游关系] crud controller / validator / repository / swagger registry 抛出 DomainError 子类。
[下游关系] api/errors.py 使用本模块将异常映射为 ErrorResponse 与 HTTP status。
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Tuple


ErrorDetail = Dict[str, Any]  # docstring: 错误细节类型（必须 JSON-safe）

ERROR_CODE_PATTERN_DOT = re.compile(r"^[a-z][a-z0-9]*(?:\.[a-z0-9_]+)+$")  # docstring: area.reason 规范

STANDARD_ERROR_CODES = {  # docstring: 通用错误码集合（即错误 kind）
    "bad_request",
    "not_found",
    "invalid_parameter",
    "validation_error",
    "conflict",
    "repository_error",
    "internal_error",
}

ERROR_HTTP_STATUS_BY_CODE = {  # docstring: 通用错误码 -> HTTP status
    "bad_request": 400,
    "not_found": 404,
    "invalid_parameter": 400,
    "validation_error": 422,
    "conflict": 409,
    "repository_error": 500,
    "internal_error": 500,
}

ERROR_RETRYABLE_BY_CODE = {  # docstring: 通用错误码 -> retryable 默认值
    "bad_request": False,
    "not_found": False,
    "invalid_parameter": False,
    "validation_error": False,
    "conflict": False,
    "repository_error": True,
    "internal_error": False,
}

INTERNAL_ERROR_CODE = "internal_error"  # docstring: 未知异常统一错误码
INTERNAL_ERROR_MESSAGE = "internal error"  # docstring: 未知异常统一消息


def is_valid_error_code(error_code: str) -> bool:
    """
    [职责] 校验错误码是否属于通用错误码或满足 area.reason 命名规范。
    [边界] 仅做格式校验，不保证全局唯一。
    """

    if not error_code:
        return False
    if error_code in STANDARD_ERROR_CODES:
        return True
    return bool(ERROR_CODE_PATTERN_DOT.match(error_code))


def ensure_json_safe_detail(detail: ErrorDetail) -> ErrorDetail:
    """
    [职责] 校验 detail 是否可 JSON 序列化。
    [边界] detail 必须是 dict；不做降级或裁剪。
    """

    if not isinstance(detail, dict):
        raise ValueError("detail must be a dict")
    try:
        json.dumps(detail)  # docstring: JSON 序列化校验
    except TypeError as exc:
        raise ValueError("detail must be JSON-serializable") from exc
    return detail


class DomainError(Exception):
    """
    [职责] 领域错误最小合同：统一 error_code/message/detail/cause，并提供 http_status/retryable 提示。
    [边界] 仅表达语义，不承担日志、HTTP 输出。
    [上游关系] controller/repository/validator 抛出本错误；必要时携带 cause。
    [下游关系] api/errors.py 根据本错误映射 HTTP status 与 ErrorResponse。
    """

    default_code = INTERNAL_ERROR_CODE
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(
        self,
        *,
        error_code: Optional[str] = None,
        message: Optional[str] = None,
        detail: Optional[ErrorDetail] = None,
        cause: Optional[BaseException] = None,
        http_status: Optional[int] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        code = error_code or self.default_code
        if not is_valid_error_code(code):
            raise ValueError(f"invalid error_code: {code}")  # docstring: 防止不规范错误码泄露
        normalized_detail = ensure_json_safe_detail(detail or {})

        resolved_message = message or self.default_message
        super().__init__(resolved_message)
        self.error_code = code  # docstring: 稳定错误码（kind tag）
        self.message = resolved_message  # docstring: 用户可读错误信息
        self.detail = normalized_detail  # docstring: JSON-safe 细节
        self.cause = cause  # docstring: 上游异常引用
        self.http_status = (
            http_status if http_status is not None else ERROR_HTTP_STATUS_BY_CODE.get(code, 500)
        )  # docstring: HTTP 映射提示（优先显式值）
        self.retryable = (
            retryable if retryable is not None else ERROR_RETRYABLE_BY_CODE.get(code, False)
        )  # docstring: 可重试提示（优先显式值）

        if cause is not None:
            self.__cause__ = cause  # docstring: 保留异常链路

    @property
    def kind(self) -> str:
        return self.error_code

    def to_dict(self) -> Dict[str, Any]:
        """
        [职责] 输出 ErrorResponse.error 结构（不包含 request_id）。
        [边界] 不包含 cause。
        """

        return {
            "code": self.error_code,
            "message": self.message,
            "detail": self.detail,
            "retryable": self.retryable,
        }


class BadRequestError(DomainError):
    """请求体无法解码为实体/ID 列表（400）。"""

    default_code = "bad_request"
    default_message = "bad request"


class NotFoundError(DomainError):
    """
    [职责] 表达 404 Not Found：缺失路径 ID 或实体不存在。
    [边界] 仅提供默认 error_code/http_status。
    """

    default_code = "not_found"
    default_message = "not found"


class InvalidParameterError(DomainError):
    """
    [职责] 表达 invalid_parameter：ID 无法解析、ID 表示与声明类型不符、批量输入为空。
    [边界] 与 NotFoundError 严格区分：类型不符不是“找不到”。
    """

    default_code = "invalid_parameter"
    default_message = "invalid parameter"


class EntityValidationError(DomainError):
    """
    [职责] 表达实体校验失败（422），detail.errors 携带逐字段错误。
    [边界] 由 validator 协作方抛出；controller 原样透传。
    """

    default_code = "validation_error"
    default_message = "entity validation failed"


class RepositoryError(DomainError):
    """
    [职责] 表达存储层失败（含事务回滚原因）。
    [边界] 不暴露 SQL 语句；cause 保留底层异常。
    """

    default_code = "repository_error"
    default_message = "repository error"


class ConflictError(DomainError):
    """409 Conflict。"""

    default_code = "conflict"
    default_message = "conflict"


class RegistryFrozenError(ConflictError):
    """DocumentRegistry 冻结后仍尝试写入。"""

    default_message = "document registry is frozen"


def to_http_error(
    error: BaseException,
    *,
    request_id: Optional[str] = None,
) -> Tuple[int, Dict[str, Any]]:
    """
    [职责] 将异常转换为 HTTP status + ErrorResponse payload（不耦合 FastAPI）。
    [边界] 不做日志记录；未知异常统一降级为 internal_error。
    [上游关系] api/errors.py 捕获异常后调用。
    [下游关系] routers/exception handler 返回统一 ErrorResponse。
    """

    if isinstance(error, DomainError):
        status_code = error.http_status
        payload = {"error": error.to_dict()}
    else:
        status_code = ERROR_HTTP_STATUS_BY_CODE[INTERNAL_ERROR_CODE]
        payload = {
            "error": {
                "code": INTERNAL_ERROR_CODE,
                "message": INTERNAL_ERROR_MESSAGE,
                "detail": {},
                "retryable": ERROR_RETRYABLE_BY_CODE[INTERNAL_ERROR_CODE],
            }
        }  # docstring: 未知异常降级为 internal_error

    if request_id:
        payload["error"]["request_id"] = request_id  # docstring: API 层注入 request_id

    return status_code, payload

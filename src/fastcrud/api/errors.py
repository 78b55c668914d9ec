# src/fastcrud/api/errors.py

"""
[职责] API 错误映射：将异常统一转换为 ErrorResponse 与 HTTP status，并提供 FastAPI exception handler。
[边界] 不负责 request_id 生成（由 middleware 负责）；仅对非领域异常记录日志。
[上游关系] routers 捕获异常后调用本模块；CrudApp 注册 domain_error_handler。
[下游关系] 返回 ErrorResponse 供客户端消费。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse

from fastcrud.api.schemas_http._common import ErrorResponse
from fastcrud.utils.constants import REQUEST_ID_HEADER
from fastcrud.utils.errors import DomainError, to_http_error
from fastcrud.utils.logging_ import get_logger, log_event


_logger = get_logger("api.errors")


def request_id_of(request: Request) -> Optional[str]:
    """读取 middleware 注入的 request_id（缺失时回退 header）。"""
    value = getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER)
    raw = str(value or "").strip()
    return raw or None


def to_error_response(
    error: BaseException,
    *,
    request_id: Optional[str] = None,
) -> Tuple[int, ErrorResponse]:
    """
    [职责] 将异常转换为 (status_code, ErrorResponse)。
    [边界] 不写 header。
    """
    status_code, payload = to_http_error(error, request_id=request_id)
    return status_code, ErrorResponse.model_validate(payload)


def to_json_response(
    error: BaseException,
    *,
    request_id: Optional[str] = None,
) -> JSONResponse:
    """
    [职责] 将异常转换为 JSONResponse（含 request_id header 回写）。
    [边界] 不修改 error 语义；未知异常降级为 internal_error 并记录堆栈。
    """
    if not isinstance(error, DomainError):
        log_event(
            _logger,
            logging.ERROR,
            "api.unhandled_error",
            fields={"request_id": request_id, "error": type(error).__name__},
            exc_info=error,
        )
    status_code, response = to_error_response(error, request_id=request_id)
    content: Dict[str, Any] = response.model_dump(exclude_none=True)

    headers: Dict[str, str] = {}
    if request_id:
        headers[REQUEST_ID_HEADER] = str(request_id)

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler：DomainError -> ErrorResponse。"""
    return to_json_response(exc, request_id=request_id_of(request))

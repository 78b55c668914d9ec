# src/fastcrud/api/schemas_http/_common.py

"""
[职责] HTTP Schema 公共组件：ErrorResponse 错误契约。
[边界] 仅描述 HTTP 输出结构；不负责 request_id 注入、异常映射或业务逻辑。
[上游关系] api/errors.py 将 DomainError 映射到 ErrorResponse。
[下游关系] 客户端统一处理错误展示。
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


ErrorDetail = Dict[str, Any]  # docstring: ErrorResponse.error.detail 结构（必须 JSON-safe）


class ErrorInfo(BaseModel):
    """
    [职责] ErrorInfo：统一错误载体（code/message/detail/retryable/request_id）。
    [边界] 不包含 HTTP status；status 由 api/errors.py 决定。
    """

    model_config = ConfigDict(extra="forbid")  # docstring: 锁死错误字段，避免 drift

    code: str = Field(..., min_length=1)  # docstring: 错误码（即 DomainError.kind）
    message: str = Field(..., min_length=1)
    detail: ErrorDetail = Field(default_factory=dict)
    retryable: bool = Field(default=False)  # docstring: 客户端重试提示（如 repository_error）
    request_id: Optional[str] = Field(default=None)  # docstring: 由 middleware 注入


class ErrorResponse(BaseModel):
    """HTTP 错误响应的顶层包裹结构。"""

    model_config = ConfigDict(extra="forbid")

    error: ErrorInfo = Field(...)

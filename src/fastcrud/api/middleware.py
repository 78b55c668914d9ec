# src/fastcrud/api/middleware.py

"""
[职责] API Middleware：注入 request_id 与请求耗时统计，并记录 api.request 结构化日志。
[边界] 不做业务逻辑与异常映射（由 routers/errors.py 负责）。
[上游关系] CrudApp.build 注册本 middleware。
[下游关系] routers/errors 读取 request.state.request_id 与 timing_ms。
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from fastcrud.schemas.ids import new_uuid
from fastcrud.utils.constants import REQUEST_ID_HEADER, TIMING_TOTAL_MS_KEY
from fastcrud.utils.logging_ import get_logger, log_event


def _resolve_header_id(value: Optional[str]) -> Optional[str]:
    raw = str(value or "").strip()
    return raw or None  # docstring: 空值回退 None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    [职责] 注入 request_id，记录 request 总耗时。
    [边界] 不捕获异常；异常照常上抛给 exception handler。
    """

    def __init__(self, app, *, logger: Optional[logging.Logger] = None) -> None:
        super().__init__(app)
        self._logger = logger or get_logger("api.request")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_ts = time.perf_counter()

        request_id = _resolve_header_id(request.headers.get(REQUEST_ID_HEADER)) or str(new_uuid())
        request.state.request_id = request_id  # docstring: routers/errors 读取

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            total_ms = (time.perf_counter() - start_ts) * 1000.0
            request.state.timing_ms = {TIMING_TOTAL_MS_KEY: total_ms}
            log_event(
                self._logger,
                logging.INFO,
                "api.request",
                context={"request_id": request_id, "method": request.method, "path": request.url.path},
                fields={"status_code": status_code, TIMING_TOTAL_MS_KEY: round(total_ms, 3)},
            )

        response.headers[REQUEST_ID_HEADER] = request_id  # docstring: 回写 request_id header
        return response

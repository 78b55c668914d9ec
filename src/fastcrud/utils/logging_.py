# src/fastcrud/utils/logging_.py

"""
[职责] 定义结构化日志字段规范与统一 logger 获取方式，提供最小 JSON 格式化 helper。
[边界] 不绑定具体日志后端；不触碰 root logger。
[上游关系] swagger registry / crud controller / api middleware 通过 get_logger/log_event 写日志。
[下游关系] stdout 收集系统消费 JSON 字段（request_id/entity/version 等）。
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union


DEFAULT_LOGGER_NAME = "fastcrud"  # docstring: 统一 logger 根名称
DEFAULT_LOG_LEVEL = logging.INFO

CONTEXT_FIELD_KEYS = (
    "request_id",
    "entity",
    "route_path",
    "version",
    "method",
    "path",
)  # docstring: 推荐结构化日志字段

_LOG_RECORD_RESERVED = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}  # docstring: LogRecord 内置字段（不作为结构化额外字段）


class StructuredLogFormatter(logging.Formatter):
    """
    [职责] 将 LogRecord 转换为 JSON 字符串（含结构化字段）。
    [边界] 仅输出基础字段 + extra。
    """

    def __init__(self, *, ensure_ascii: bool = True) -> None:
        super().__init__()
        self._ensure_ascii = ensure_ascii

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: v for k, v in record.__dict__.items() if k not in _LOG_RECORD_RESERVED and v is not None
        }  # docstring: 仅保留非空 extra 字段
        payload.update(extras)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = record.stack_info

        return json.dumps(payload, ensure_ascii=self._ensure_ascii, default=str)


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else DEFAULT_LOG_LEVEL  # docstring: 非法级别回退 INFO


def configure_logging(
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    level: Union[int, str, None] = None,
    ensure_ascii: bool = True,
) -> logging.Logger:
    """
    [职责] 配置统一的 base logger（JSON formatter）。
    [边界] 不触碰 root logger；重复调用不会重复挂载 handler。
    [上游关系] CrudApp 构建或测试初始化时调用。
    [下游关系] get_logger 复用已配置的 base logger。
    """

    if level is None:
        from fastcrud.config import settings

        level = settings.FASTCRUD_LOG_LEVEL  # docstring: 默认读取 settings
    resolved = _resolve_level(level)

    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved)

    has_handler = any(getattr(h, "name", "") == "structured_json" for h in logger.handlers)
    if not has_handler:
        handler = logging.StreamHandler()
        handler.name = "structured_json"  # docstring: 标记 handler，避免重复挂载
        handler.setFormatter(StructuredLogFormatter(ensure_ascii=ensure_ascii))
        logger.addHandler(handler)

    logger.propagate = False  # docstring: 避免重复向 root 传播
    return logger


def get_logger(name: Optional[str] = None, *, level: Optional[int] = None) -> logging.Logger:
    """
    [职责] 获取项目统一 logger（自动确保 base logger 已配置）。
    [边界] 子 logger 统一挂载在 fastcrud 根 logger 下。
    """

    base = logging.getLogger(DEFAULT_LOGGER_NAME)
    if not base.handlers:
        configure_logging()
    full_name = name or DEFAULT_LOGGER_NAME
    if name and not name.startswith(DEFAULT_LOGGER_NAME):
        full_name = f"{DEFAULT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(full_name)
    if level is not None:
        logger.setLevel(level)
    return logger


def build_log_fields(
    *,
    context: Optional[Any] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    [职责] 统一构建结构化日志字段（context 中的标准字段 + extra）。
    [边界] 不校验字段合法性；None 值丢弃。
    """

    fields: Dict[str, Any] = {}
    if context is not None:
        for key in CONTEXT_FIELD_KEYS:
            value = context.get(key) if isinstance(context, Mapping) else getattr(context, key, None)
            if value is not None:
                fields[key] = str(value)  # docstring: 统一转为字符串输出
    if extra:
        for key, value in extra.items():
            if value is not None:
                fields[key] = value
    return fields


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    context: Optional[Any] = None,
    fields: Optional[Mapping[str, Any]] = None,
    exc_info: Optional[Any] = None,
) -> None:
    """统一记录结构化日志。"""

    extra = build_log_fields(context=context, extra=fields)
    logger.log(level, message, extra=extra, exc_info=exc_info)

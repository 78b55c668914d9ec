# src/fastcrud/db/base.py

"""
[职责] ORM 声明基类与通用时间戳 mixin。
[边界] 不定义具体表；实体表由调用方基于 Base 声明。
[上游关系] 调用方的 ORM model 继承 Base（可叠加 TimestampMixin）。
[下游关系] engine.init_db 使用 Base.metadata 建表；SqlAlchemyCrudRepository 读取 model 的列集合。
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="创建时间",  # docstring: 首次写入时间
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="更新时间",  # docstring: 最近一次 UPDATE
    )

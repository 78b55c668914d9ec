# src/fastcrud/db/repo/__init__.py

"""
[职责] db.repo 聚合导出：CrudRepository 合同的 SQLAlchemy 实现。
[边界] 仅做导入与 __all__ 暴露。
"""

from __future__ import annotations

from .crud_repo import SqlAlchemyCrudRepository

__all__ = ["SqlAlchemyCrudRepository"]

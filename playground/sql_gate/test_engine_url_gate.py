# playground/sql_gate/test_engine_url_gate.py

"""
[职责] engine url gate：锁死数据库连接串的解析优先级（显式 > settings > DATABASE_URL > 本地 sqlite）。
[边界] 不建连接；只测 resolve_db_url。
[上游关系] fastcrud/db/engine.py + fastcrud/config.py。
[下游关系] create_engine / get_engine 依赖该解析结果。
"""

from __future__ import annotations

import pytest

from fastcrud.config import settings
from fastcrud.db.engine import resolve_db_url


pytestmark = pytest.mark.sql_gate


def test_explicit_override_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "FASTCRUD_DATABASE_URL", "sqlite+aiosqlite:///settings.db")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///env.db")
    assert resolve_db_url("sqlite+aiosqlite:///override.db") == "sqlite+aiosqlite:///override.db"


def test_settings_url_beats_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "FASTCRUD_DATABASE_URL", "sqlite+aiosqlite:///settings.db")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///env.db")
    assert resolve_db_url() == "sqlite+aiosqlite:///settings.db"


def test_database_url_env_used_when_settings_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "FASTCRUD_DATABASE_URL", "")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///env.db")
    assert resolve_db_url() == "sqlite+aiosqlite:///env.db"


def test_local_sqlite_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "FASTCRUD_DATABASE_URL", "")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    url = resolve_db_url()
    assert url.startswith("sqlite+aiosqlite:///")
    assert url.endswith("/.Local/fastcrud.db")

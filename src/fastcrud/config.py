# src/fastcrud/config.py
from __future__ import annotations

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


def _find_repo_root(start: Path) -> Path:
    """
    Best-effort repository root discovery.
    - Prefer the closest ancestor containing `pyproject.toml`.
    - Fallback to the start directory if not found.
    """
    cur = start.resolve()
    for _ in range(20):
        if (cur / "pyproject.toml").exists():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent
    return start.resolve()


PACKAGE_ROOT = Path(__file__).resolve().parent
REPO_ROOT = _find_repo_root(PACKAGE_ROOT)

# Load .env into process environment early so uvicorn/alembic style tools see it too.
load_dotenv(str(REPO_ROOT / ".env"), override=False)

LOCAL_ROOT = REPO_ROOT / ".Local"


class Settings(BaseSettings):
    FASTCRUD_DATABASE_URL: str = ""  # docstring: 为空时依次回退 DATABASE_URL 环境变量、本地 sqlite 文件
    FASTCRUD_SQL_ECHO: bool = False

    FASTCRUD_API_PREFIX: str = "/api"
    FASTCRUD_DEFAULT_VERSION: str = "v1"
    FASTCRUD_HOST: str = "localhost:8080"

    FASTCRUD_DEFAULT_PAGE_SIZE: int = int(10)
    FASTCRUD_MAX_PAGE_SIZE: int = int(100)

    FASTCRUD_LOG_LEVEL: str = "INFO"

    @property
    def local_root(self) -> Path:
        LOCAL_ROOT.mkdir(parents=True, exist_ok=True)
        return LOCAL_ROOT

    model_config = SettingsConfigDict(
        env_file=str(REPO_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()

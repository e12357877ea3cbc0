from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Judge0 / execution backend
        self.judge0_api_url: str = os.getenv("JUDGE0_BASE_URL") or os.getenv("JUDGE0_URL", "http://localhost:2358")
        self.judge0_api_key: str = os.getenv("JUDGE0_KEY", "")
        self.judge0_host: str = os.getenv("JUDGE0_HOST", "")
        self.judge0_timeout_s: float = _env_float("JUDGE0_TIMEOUT_S", 10.0) or 10.0
        self.judge0_submit_concurrency: int = max(1, _env_int("JUDGE0_SUBMIT_CONCURRENCY", 8))
        self.judge0_poll_max_attempts: int = max(1, _env_int("JUDGE0_POLL_MAX_ATTEMPTS", 15))
        self.judge0_poll_interval_s: float = _env_float("JUDGE0_POLL_INTERVAL_S", 1.5) or 0.0
        # Overall per-call ceiling; unset or <= 0 leaves only the poll budget in place
        deadline = _env_float("JUDGE_DEADLINE_S", None)
        self.judge_deadline_s: Optional[float] = deadline if deadline is not None and deadline > 0 else None
        # App meta
        self.app_name: str = "Code Judge Backend"
        self.version: str = "0.1.0"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.allow_origins: str = os.getenv(
            "ALLOW_ORIGINS",
            "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000",
        )

    @property
    def origins(self) -> list[str]:
        return [o.strip().rstrip("/") for o in self.allow_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()

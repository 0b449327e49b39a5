"""
Configuration helpers for the portfolio site.

Exposes a Settings object that reads environment variables (public base URL,
RPC backend, timers, content paths) so that routers/services do not fetch
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    shortener_rpc_url: str
    shortener_timeout_seconds: float
    slug_check_debounce_ms: int
    copy_reset_ms: int
    content_dir: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str | None, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    public_base_url = os.getenv("PUBLIC_BASE_URL", "https://nexxel.dev").rstrip("/")
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=public_base_url,
        shortener_rpc_url=os.getenv("SHORTENER_RPC_URL", f"{public_base_url}/api/trpc").rstrip("/"),
        shortener_timeout_seconds=_float(os.getenv("SHORTENER_TIMEOUT_SECONDS"), 5.0),
        slug_check_debounce_ms=_int(os.getenv("SLUG_CHECK_DEBOUNCE_MS"), 100),
        copy_reset_ms=_int(os.getenv("COPY_RESET_MS"), 3000),
        content_dir=os.getenv("CONTENT_DIR", os.path.join(ROOT_DIR, "content")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

# Make the portfolio package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.core import config as core_config  # noqa: E402
from portfolio.core.config import Settings  # noqa: E402
from portfolio.domain.links import ShortLink, SlugCheck  # noqa: E402
from portfolio.services.shortener_client import SlugConflictError  # noqa: E402


class ManualTimer:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when the test calls ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


class FakeShortenerClient:
    """In-memory stand-in for the RPC backend."""

    def __init__(self, used=()) -> None:
        self.used = set(used)
        self.check_calls: list[str] = []
        self.create_calls: list[tuple[str, str]] = []
        self.check_gates: dict[str, asyncio.Event] = {}
        self.check_error: Exception | None = None
        self.create_gate: asyncio.Event | None = None
        self.create_error: Exception | None = None

    async def check_slug(self, slug: str) -> SlugCheck:
        self.check_calls.append(slug)
        gate = self.check_gates.get(slug)
        if gate is not None:
            await gate.wait()
        if self.check_error is not None:
            raise self.check_error
        return SlugCheck(slug=slug, used=slug in self.used)

    async def create(self, slug: str, url: str) -> ShortLink:
        self.create_calls.append((slug, url))
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.create_error is not None:
            raise self.create_error
        if slug in self.used:
            raise SlugConflictError("This link is not available")
        self.used.add(slug)
        return ShortLink(slug=slug, url=url)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def fake_client() -> FakeShortenerClient:
    return FakeShortenerClient(used={"taken"})


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        app_env="test",
        public_base_url="https://nexxel.dev",
        shortener_rpc_url="https://backend.test/api/trpc",
        shortener_timeout_seconds=1.0,
        slug_check_debounce_ms=100,
        copy_reset_ms=3000,
        content_dir=str(ROOT / "content"),
        log_level="WARNING",
    )


@pytest.fixture()
def clean_env(monkeypatch):
    """Drop shortener env vars and the cached Settings around a test."""
    for name in (
        "APP_ENV",
        "PUBLIC_BASE_URL",
        "SHORTENER_RPC_URL",
        "SHORTENER_TIMEOUT_SECONDS",
        "SLUG_CHECK_DEBOUNCE_MS",
        "COPY_RESET_MS",
        "CONTENT_DIR",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield monkeypatch
    core_config.get_settings.cache_clear()

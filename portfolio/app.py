import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from portfolio.core.config import Settings, get_settings
from portfolio.core.log import configure_logging
from portfolio.routers import pages as pages_router
from portfolio.routers import shortener as shortener_router
from portfolio.services.content import ContentService
from portfolio.services.shortener_client import HttpShortenerClient, ShortenerClient

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
WEB = os.path.join(BASE, "..", "web")
TEMPLATES = os.path.join(BASE, "..", "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data:; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self' 'unsafe-inline'; "
            "connect-src 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class CachedStaticFiles(StaticFiles):
    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = "public, max-age=86400"
        return response


def _lifespan_closing(client: HttpShortenerClient):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    *,
    shortener_client: Optional[ShortenerClient] = None,
    content: Optional[ContentService] = None,
) -> FastAPI:
    """Factory compatible with uvicorn ``--factory``; collaborators can be injected."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    lifespan = None
    if shortener_client is None:
        owned = HttpShortenerClient(
            settings.shortener_rpc_url,
            timeout=settings.shortener_timeout_seconds,
        )
        shortener_client = owned
        lifespan = _lifespan_closing(owned)

    app = FastAPI(title="nexxel.dev", lifespan=lifespan)
    app.state.settings = settings
    app.state.shortener_client = shortener_client
    app.state.content = content or ContentService(settings.content_dir)
    app.state.templates = Jinja2Templates(directory=TEMPLATES)

    if os.path.isdir(WEB):
        app.mount("/static", CachedStaticFiles(directory=WEB), name="static")
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.include_router(pages_router.router)
    app.include_router(shortener_router.router)

    logger.info("Site ready (env=%s, shortener=%s)", settings.app_env, settings.shortener_rpc_url)
    return app

"""RPC client for the link shortener backend and its error taxonomy."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from portfolio.domain.links import ShortLink, SlugCheck

logger = logging.getLogger(__name__)

CHECK_SLUG_PROCEDURE = "shortener.checkSlug"
CREATE_PROCEDURE = "shortener.create"


class ShortenerError(Exception):
    """Base exception for the shortener workflow."""


class InvalidLinkError(ShortenerError):
    """Raised when slug or url do not satisfy format rules."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class SlugConflictError(ShortenerError):
    """Raised when the slug is already assigned to another link."""


class ShortenerUnavailableError(ShortenerError):
    """Timeouts, transport failures and 5xx answers. Safe to retry."""


class ShortenerClient(Protocol):
    async def check_slug(self, slug: str) -> SlugCheck: ...

    async def create(self, slug: str, url: str) -> ShortLink: ...


class HttpShortenerClient:
    """Speaks the tRPC-over-HTTP wire format of the shortener backend.

    Queries are ``GET {base_url}/{procedure}?input=<json>``, mutations are
    ``POST {base_url}/{procedure}`` with a JSON body. Successful answers are
    wrapped in ``{"result": {"data": ...}}`` and failures in
    ``{"error": {"message": ..., "data": {"code": ..., "httpStatus": ...}}}``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpShortenerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def check_slug(self, slug: str) -> SlugCheck:
        data = await self._call("GET", CHECK_SLUG_PROCEDURE, {"slug": slug})
        return SlugCheck(slug=slug, used=bool((data or {}).get("used")))

    async def create(self, slug: str, url: str) -> ShortLink:
        data = await self._call("POST", CREATE_PROCEDURE, {"slug": slug, "url": url}) or {}
        return ShortLink(slug=data.get("slug") or slug, url=data.get("url") or url)

    async def _call(self, method: str, procedure: str, payload: dict) -> Any:
        endpoint = f"{self.base_url}/{procedure}"
        try:
            if method == "GET":
                response = await self._http.get(endpoint, params={"input": json.dumps(payload)})
            else:
                response = await self._http.post(endpoint, json=payload)
        except httpx.TimeoutException as exc:
            logger.warning("%s timed out", procedure)
            raise ShortenerUnavailableError("The shortener took too long to answer.") from exc
        except httpx.RequestError as exc:
            logger.warning("%s failed: %s", procedure, exc)
            raise ShortenerUnavailableError("Could not reach the shortener.") from exc
        return _unwrap(procedure, response)


def _unwrap(procedure: str, response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        body = None

    if response.is_success and isinstance(body, dict) and "result" in body:
        data = (body.get("result") or {}).get("data")
        # superjson transformer nests the payload under "json"
        if isinstance(data, dict) and set(data) <= {"json", "meta"} and "json" in data:
            data = data["json"]
        return data

    error = body.get("error") if isinstance(body, dict) else None
    error = error if isinstance(error, dict) else {}
    details = error.get("data") if isinstance(error.get("data"), dict) else {}
    code = str(details.get("code") or "").upper()
    status = _int(details.get("httpStatus")) or response.status_code
    message = error.get("message") or f"{procedure} failed with status {status}"

    if code == "CONFLICT" or status == 409:
        raise SlugConflictError("This link is not available")
    if code == "BAD_REQUEST" or status in (400, 422):
        raise InvalidLinkError(message)
    if status >= 500 or status in (408, 429):
        logger.warning("%s answered %s: %s", procedure, status, message)
        raise ShortenerUnavailableError("The shortener is unavailable, try again.")
    logger.warning("%s unexpected answer %s: %s", procedure, status, message)
    raise ShortenerError(message)


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0

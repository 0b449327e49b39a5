from __future__ import annotations

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from portfolio.core.config import Settings, get_settings
from portfolio.domain.slugs import (
    SLUG_HINT,
    SLUG_MAX_LENGTH,
    URL_MAX_LENGTH,
    is_valid_slug,
    normalize_slug,
)
from portfolio.services.link_form import SLUG_TAKEN_MESSAGE, LinkFormController, MutationStatus
from portfolio.services.shortener_client import (
    InvalidLinkError,
    ShortenerClient,
    ShortenerError,
    ShortenerUnavailableError,
    SlugConflictError,
)

router = APIRouter(prefix="/shortener", tags=["shortener"])


def _get_shortener_client(request: Request) -> ShortenerClient:
    client = getattr(getattr(request.app, "state", None), "shortener_client", None)
    if not client:
        raise RuntimeError("Shortener client not configured")
    return client


def _get_templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _new_form(request: Request) -> LinkFormController:
    return LinkFormController.from_settings(_get_shortener_client(request), _settings(request))


def _render(request: Request, form: LinkFormController, status_code: int = 200) -> HTMLResponse:
    settings = _settings(request)
    templates = _get_templates(request)
    return templates.TemplateResponse(
        request,
        "shortener.html",
        {
            "view": form.view(),
            "slug_hint": SLUG_HINT,
            "taken_message": SLUG_TAKEN_MESSAGE,
            "slug_max_length": SLUG_MAX_LENGTH,
            "url_max_length": URL_MAX_LENGTH,
            "debounce_ms": settings.slug_check_debounce_ms,
            "copy_reset_ms": settings.copy_reset_ms,
        },
        status_code=status_code,
    )


def _status_for(form: LinkFormController) -> int:
    if form.status is MutationStatus.SUCCESS or not form.errors:
        return 200
    if form.slug_taken or isinstance(form.last_error, SlugConflictError):
        return 409
    if isinstance(form.last_error, ShortenerUnavailableError):
        return 503
    if form.last_error is not None and not isinstance(form.last_error, InvalidLinkError):
        return 502
    return 400


@router.get("", response_class=HTMLResponse)
async def shortener_page(request: Request):
    form = _new_form(request)
    return _render(request, form)


@router.get("/check")
async def slug_check(request: Request, slug: str = ""):
    value = normalize_slug(slug)
    if not is_valid_slug(value):
        raise HTTPException(400, SLUG_HINT)
    client = _get_shortener_client(request)
    try:
        result = await client.check_slug(value)
    except ShortenerUnavailableError as exc:
        raise HTTPException(503, str(exc))
    except ShortenerError as exc:
        raise HTTPException(502, str(exc))
    return {"slug": value, "used": result.used}


@router.get("/random")
async def slug_random(request: Request):
    form = _new_form(request)
    try:
        check = await form.on_random_slug_requested()
        if check is None:
            raise HTTPException(503, form.errors.get("slug") or "Could not check the slug.")
        return {"slug": check.slug, "used": check.used}
    finally:
        form.close()


@router.post("", response_class=HTMLResponse)
async def shortener_submit(request: Request, slug: str = Form(""), url: str = Form("")):
    form = _new_form(request)
    try:
        form.on_slug_change(slug)
        form.on_url_change(url)
        if not form.validate():
            await form.refresh_availability()
        await form.submit()
        return _render(request, form, status_code=_status_for(form))
    finally:
        form.close()

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from portfolio.services.content import ContentService

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _content(request: Request) -> ContentService:
    svc = getattr(getattr(request.app, "state", None), "content", None)
    if not svc:
        raise RuntimeError("ContentService not configured")
    return svc


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    content = _content(request)
    templates = _templates(request)
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "hero": content.hero(),
            "projects": content.projects(),
            "posts": content.featured_posts(),
        },
    )


@router.get("/health")
def health():
    return {"status": "ok"}


# Silence Chrome devtools probes (avoids noisy 404s in logs)
@router.get("/.well-known/appspecific/com.chrome.devtools.json")
def chrome_devtools_wellknown():
    return PlainTextResponse("", status_code=204)

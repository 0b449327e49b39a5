"""
Utility helpers shared across routers/services.
"""

from typing import Optional

from .config import get_settings

SHORT_LINK_PREFIX = "/r"


def absolute_base(origin: Optional[str] = None) -> str:
    """
    Normalise an origin to ``scheme://host`` form, defaulting to PUBLIC_BASE_URL.
    Origins without a scheme are treated as https.
    """
    settings = get_settings()
    base = (origin or settings.public_base_url).strip().rstrip("/")
    if not (base.startswith("http://") or base.startswith("https://")):
        base = "https://" + base.lstrip("/")
    return base


def short_link_base(origin: Optional[str] = None) -> str:
    return absolute_base(origin) + SHORT_LINK_PREFIX


def short_link_url(slug: str, origin: Optional[str] = None) -> str:
    """Absolute short link for ``slug``; the same value is displayed and copied."""
    return f"{short_link_base(origin)}/{slug}"

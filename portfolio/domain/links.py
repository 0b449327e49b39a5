"""Value types exchanged between the link form and the shortener backend."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FormData:
    """Mutable form state, one instance per form controller."""

    slug: str = ""
    url: str = ""

    def clear(self) -> None:
        self.slug = ""
        self.url = ""


@dataclass(frozen=True)
class SlugCheck:
    """Availability result keyed by the slug it was fetched for."""

    slug: str
    used: bool


@dataclass(frozen=True)
class ShortLink:
    slug: str
    url: str

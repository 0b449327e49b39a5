"""
Link-creation form flow.

The controller owns the form state of one visitor: it checks slug availability
while the slug is typed, issues the create request on submit and exposes a
render-ready view for the three screens (editing, submitting, success).
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Protocol

from portfolio.core.config import Settings, get_settings
from portfolio.core.utils import short_link_base, short_link_url
from portfolio.domain.links import FormData, ShortLink, SlugCheck
from portfolio.domain.slugs import (
    SLUG_HINT,
    SLUG_MAX_LENGTH,
    URL_MAX_LENGTH,
    is_valid_slug,
    is_valid_url,
    normalize_slug,
    random_slug,
)
from portfolio.services.shortener_client import (
    InvalidLinkError,
    ShortenerClient,
    ShortenerError,
    SlugConflictError,
)
from portfolio.services.timers import CopyIndicator, Debouncer, Scheduler

logger = logging.getLogger(__name__)

SLUG_TAKEN_MESSAGE = "This link is not available"


class MutationStatus(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class Clipboard(Protocol):
    def write_text(self, value: str) -> None: ...


class MemoryClipboard:
    """Keeps the last copied value; used when no system clipboard is wired."""

    def __init__(self) -> None:
        self.value = ""

    def write_text(self, value: str) -> None:
        self.value = value


@dataclass(frozen=True)
class LinkFormView:
    """Everything a template needs to draw the form."""

    mode: str
    slug: str
    url: str
    preview: str
    preview_base: str
    slug_taken: bool
    submit_label: str
    submit_disabled: bool
    short_link: Optional[str] = None
    copied: bool = False
    errors: Mapping[str, str] = field(default_factory=dict)


class LinkFormController:
    def __init__(
        self,
        client: ShortenerClient,
        *,
        origin: Optional[str] = None,
        clipboard: Optional[Clipboard] = None,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = 0.1,
        copy_reset_seconds: float = 3.0,
        slug_generator: Callable[[], str] = random_slug,
    ) -> None:
        self.client = client
        self.origin = origin
        self.form = FormData()
        self.status = MutationStatus.IDLE
        self.availability: Optional[SlugCheck] = None
        self.created: Optional[ShortLink] = None
        self.errors: dict[str, str] = {}
        self.last_error: Optional[ShortenerError] = None
        self.clipboard = clipboard or MemoryClipboard()
        self._slug_generator = slug_generator
        self._check_seq = 0
        self._generation = 0
        self._checks: set[asyncio.Task] = set()
        self._known: dict[str, SlugCheck] = {}
        self._creating_generation: Optional[int] = None
        self._debouncer = Debouncer(self._spawn_check, debounce_seconds, scheduler=scheduler)
        self.copy_indicator = CopyIndicator(copy_reset_seconds, scheduler=scheduler)

    @classmethod
    def from_settings(
        cls,
        client: ShortenerClient,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> "LinkFormController":
        settings = settings or get_settings()
        kwargs.setdefault("origin", settings.public_base_url)
        kwargs.setdefault("debounce_seconds", settings.slug_check_debounce_ms / 1000)
        kwargs.setdefault("copy_reset_seconds", settings.copy_reset_ms / 1000)
        return cls(client, **kwargs)

    # -------------------------- derived state --------------------------
    @property
    def slug_taken(self) -> bool:
        check = self._known.get(self.form.slug)
        return bool(check and check.used)

    @property
    def submit_disabled(self) -> bool:
        return self.slug_taken

    @property
    def short_link(self) -> Optional[str]:
        if self.created is None:
            return None
        return short_link_url(self.created.slug, self.origin)

    # -------------------------- input events --------------------------
    def on_slug_change(self, value: str) -> None:
        self.form.slug = normalize_slug(value)
        self.errors.pop("slug", None)
        self._debouncer.trigger()

    async def on_random_slug_requested(self) -> Optional[SlugCheck]:
        self.form.slug = self._slug_generator()
        self.errors.pop("slug", None)
        self._debouncer.cancel()
        return await self.refresh_availability()

    def on_url_change(self, value: str) -> None:
        self.form.url = value
        self.errors.pop("url", None)

    # -------------------------- availability --------------------------
    def _spawn_check(self) -> None:
        task = asyncio.ensure_future(self.refresh_availability())
        self._checks.add(task)
        task.add_done_callback(self._checks.discard)

    async def refresh_availability(self) -> Optional[SlugCheck]:
        """Query the backend for the current slug; only the newest answer is kept."""
        self._check_seq += 1
        seq = self._check_seq
        slug = self.form.slug
        if not is_valid_slug(slug):
            return None
        try:
            result = await self.client.check_slug(slug)
        except ShortenerError as exc:
            logger.warning("Availability check for %r failed: %s", slug, exc)
            if seq == self._check_seq:
                self.errors["slug"] = str(exc)
            return None
        if seq != self._check_seq:
            logger.debug("Dropping stale availability answer for %r", slug)
            return None
        check = SlugCheck(slug=slug, used=result.used)
        self.availability = check
        self._known[slug] = check
        self.errors.pop("slug", None)
        return check

    async def settle(self) -> None:
        """Wait for availability checks already started."""
        while self._checks:
            results = await asyncio.gather(*list(self._checks), return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    raise result

    # -------------------------- submission --------------------------
    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        slug = self.form.slug
        url = (self.form.url or "").strip()
        if not slug:
            errors["slug"] = "Choose a slug."
        elif len(slug) > SLUG_MAX_LENGTH:
            errors["slug"] = f"Use at most {SLUG_MAX_LENGTH} characters."
        elif not is_valid_slug(slug):
            errors["slug"] = SLUG_HINT
        if not url:
            errors["url"] = "Enter the link to shorten."
        elif len(url) > URL_MAX_LENGTH:
            errors["url"] = f"Links are limited to {URL_MAX_LENGTH} characters."
        elif not is_valid_url(url):
            errors["url"] = "Enter a valid URL, e.g. https://duckduckgo.com"
        return errors

    async def submit(self) -> Optional[ShortLink]:
        if self.status is MutationStatus.SUCCESS:
            return self.created
        self.last_error = None
        errors = self.validate()
        if errors:
            self.errors = errors
            return None
        if self.slug_taken:
            self.errors["slug"] = SLUG_TAKEN_MESSAGE
            return None
        if self._creating_generation == self._generation:
            logger.debug("Create already in flight, ignoring submit")
            return None

        # one create per form generation; reset() starts a new generation
        generation = self._creating_generation = self._generation
        try:
            slug, url = self.form.slug, self.form.url.strip()
            self.errors = {}
            self.status = MutationStatus.SUBMITTING
            try:
                link = await self.client.create(slug, url)
            except SlugConflictError as exc:
                self.last_error = exc
                outcome, error_field, message = None, "slug", str(exc) or SLUG_TAKEN_MESSAGE
                if generation == self._generation:
                    self.availability = self._known[slug] = SlugCheck(slug=slug, used=True)
            except InvalidLinkError as exc:
                self.last_error = exc
                outcome, error_field, message = None, exc.field or "form", str(exc)
            except ShortenerError as exc:
                self.last_error = exc
                outcome, error_field, message = None, "form", str(exc)
            else:
                outcome, error_field, message = link, None, ""

            if generation != self._generation:
                logger.debug("Form was reset while creating %r", slug)
                return None
            if outcome is None:
                logger.info("Create for %r failed: %s", slug, message)
                self.errors[error_field or "form"] = message
                self.status = MutationStatus.ERROR
                return None
            logger.info("Created short link %r -> %s", outcome.slug, outcome.url)
            self.created = outcome
            self.status = MutationStatus.SUCCESS
            return outcome
        finally:
            if self._creating_generation == generation:
                self._creating_generation = None

    # -------------------------- success screen --------------------------
    def copy(self) -> Optional[str]:
        value = self.short_link
        if self.status is not MutationStatus.SUCCESS or value is None:
            return None
        self.clipboard.write_text(value)
        self.copy_indicator.flash()
        return value

    def reset(self) -> None:
        """'Create New': back to an empty editing form."""
        self._generation += 1
        self._invalidate_checks()
        self.form.clear()
        self.status = MutationStatus.IDLE
        self.availability = None
        self._known.clear()
        self.created = None
        self.errors = {}
        self.last_error = None
        self.copy_indicator.clear()

    def close(self) -> None:
        self._invalidate_checks()
        self.copy_indicator.clear()

    def _invalidate_checks(self) -> None:
        self._debouncer.cancel()
        self._check_seq += 1
        for task in list(self._checks):
            task.cancel()

    # -------------------------- rendering --------------------------
    def view(self) -> LinkFormView:
        if self.status is MutationStatus.SUCCESS:
            mode = "success"
        elif self.status is MutationStatus.SUBMITTING:
            mode = "submitting"
        else:
            mode = "editing"
        taken = self.slug_taken
        base = short_link_base(self.origin)
        preview = SLUG_TAKEN_MESSAGE if taken else f"{base}/{self.form.slug}"
        return LinkFormView(
            mode=mode,
            slug=self.form.slug,
            url=self.form.url,
            preview=preview,
            preview_base=base,
            slug_taken=taken,
            submit_label="Creating" if mode == "submitting" else "Create",
            submit_disabled=self.submit_disabled,
            short_link=self.short_link,
            copied=self.copy_indicator.copied,
            errors=dict(self.errors),
        )

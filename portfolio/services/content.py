"""Static page content (hero, projects, featured posts) read from JSON files."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from portfolio.core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_COLOR = "#8B8B8B"


@dataclass(frozen=True)
class Hero:
    name: str
    tagline: str
    avatar: str
    github_url: str
    email: str


@dataclass(frozen=True)
class Project:
    url: str
    repo: str
    description: str
    stars: str
    forks: str
    language: str
    language_color: str


@dataclass(frozen=True)
class Post:
    title: str
    url: str


def _read_json(path: str, default):
    if not os.path.exists(path):
        logger.warning("Content file %s missing", path)
        return default
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


class ContentService:
    """Loads page content once from ``content_dir``."""

    def __init__(self, content_dir: Optional[str] = None) -> None:
        self.content_dir = content_dir or get_settings().content_dir
        self._hero: Optional[Hero] = None
        self._projects: Optional[list[Project]] = None
        self._posts: Optional[list[Post]] = None

    def _path(self, name: str) -> str:
        return os.path.join(self.content_dir, name)

    def hero(self) -> Hero:
        if self._hero is None:
            data = _read_json(self._path("hero.json"), {})
            self._hero = Hero(
                name=data.get("name", ""),
                tagline=data.get("tagline", ""),
                avatar=data.get("avatar", ""),
                github_url=data.get("github_url", ""),
                email=data.get("email", ""),
            )
        return self._hero

    def projects(self) -> list[Project]:
        if self._projects is None:
            items = _read_json(self._path("projects.json"), [])
            self._projects = [
                Project(
                    url=item["url"],
                    repo=item.get("repo", ""),
                    description=item.get("description", ""),
                    stars=str(item.get("stars", "0")),
                    forks=str(item.get("forks", "0")),
                    language=item.get("language", ""),
                    language_color=item.get("language_color") or DEFAULT_LANGUAGE_COLOR,
                )
                for item in items
                if item.get("url")
            ]
        return self._projects

    def featured_posts(self, limit: int = 3) -> list[Post]:
        if self._posts is None:
            items = _read_json(self._path("posts.json"), [])
            self._posts = [
                Post(title=item["title"], url=item["url"])
                for item in items
                if item.get("title") and item.get("url") and item.get("featured", True)
            ]
        return self._posts[:limit]

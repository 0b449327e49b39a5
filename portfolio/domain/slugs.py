"""Domain helpers for slug and destination URL validation."""
from __future__ import annotations

import random
import re
import urllib.parse as urlparse

SLUG_PATTERN = re.compile(r"[-a-zA-Z0-9]+")
SLUG_MIN_LENGTH = 1
SLUG_MAX_LENGTH = 20
URL_MAX_LENGTH = 3000

SLUG_HINT = "Only alphanumeric characters and hyphens are allowed. No spaces."

# Every word is at most 6 characters so three words plus two hyphens fit in 20.
ADJECTIVES = (
    "bold", "brave", "bright", "calm", "clever", "cozy", "crisp",
    "curly", "dizzy", "eager", "fancy", "fluffy", "fuzzy", "gentle", "giant",
    "glad", "happy", "hidden", "jolly", "kind", "lazy", "lucky", "mighty",
    "noisy", "odd", "proud", "quick", "quiet", "rapid", "rusty", "shiny",
    "silly", "sleepy", "smooth", "snappy", "spicy", "sunny", "swift", "tiny",
    "vivid", "wild", "witty", "young", "zesty",
)
NOUNS = (
    "apple", "badge", "bear", "bird", "boat", "book", "bread", "cactus",
    "camera", "candle", "cat", "cloud", "coat", "comet", "dog", "dragon",
    "engine", "fish", "forest", "fox", "garden", "guitar", "hat", "island",
    "jacket", "kettle", "kite", "lamp", "lemon", "lion", "moon", "mango",
    "night", "ocean", "owl", "panda", "piano", "planet", "river", "rocket",
    "shoe", "spoon", "star", "tiger", "tree", "wave", "whale", "window",
)


def normalize_slug(value: str | None) -> str:
    """Slugs are stored lowercase exactly as typed otherwise."""
    return (value or "").lower()


def is_valid_slug(value: str | None) -> bool:
    """Return True when slug matches the allowed pattern and length."""
    if not value:
        return False
    if not SLUG_MIN_LENGTH <= len(value) <= SLUG_MAX_LENGTH:
        return False
    return bool(SLUG_PATTERN.fullmatch(value))


def is_valid_url(value: str | None) -> bool:
    """Absolute URL (scheme and host) no longer than URL_MAX_LENGTH."""
    v = (value or "").strip()
    if not v or len(v) > URL_MAX_LENGTH:
        return False
    try:
        parsed = urlparse.urlparse(v)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc) and " " not in v


def random_slug(rng: random.Random | None = None) -> str:
    """
    Human readable slug such as ``shiny-brave-rocket``.
    Two adjectives followed by a noun; always a valid slug.
    """
    rng = rng or random.SystemRandom()
    return "-".join((rng.choice(ADJECTIVES), rng.choice(ADJECTIVES), rng.choice(NOUNS)))

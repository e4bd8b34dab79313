"""Content statistics and slug generation for the editor sidebar."""

from __future__ import annotations

import math
import re
import unicodedata

from pydantic import BaseModel

WORDS_PER_MINUTE = 200


class ContentStats(BaseModel):
    words: int = 0
    characters: int = 0
    sentences: int = 0
    paragraphs: int = 0
    reading_time: int = 0


def reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes to read ``text``, rounded up."""
    words = len(text.split())
    return math.ceil(words / words_per_minute)


def content_stats(text: str) -> ContentStats:
    words = text.split()
    return ContentStats(
        words=len(words),
        characters=len(text),
        sentences=len([s for s in re.split(r"[.!?]+", text) if s.strip()]),
        paragraphs=len([p for p in re.split(r"\n\n+", text) if p.strip()]),
        reading_time=math.ceil(len(words) / WORDS_PER_MINUTE),
    )


def slugify(title: str) -> str:
    """Build a URL slug: accents stripped, lowercase, hyphen-separated."""
    normalized = unicodedata.normalize("NFD", title)
    ascii_only = "".join(c for c in normalized if not unicodedata.combining(c))
    slug = re.sub(r"[^a-z0-9\s-]", "", ascii_only.lower())
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")

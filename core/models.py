from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class QueryMode(str, Enum):
    NEWEST = "newest"
    TAG = "tag"
    SEARCH = "search"


@dataclass(frozen=True)
class Story:
    """A single listing entry as rendered by the site."""

    title: str
    url: str
    score: str  # raw text, parsed only when ranking
    tags: tuple[str, ...]
    comments: int
    username: str


@dataclass
class CollectResult:
    """Outcome of a single top-level collection."""

    mode: QueryMode
    parameter: str | None
    requested: int
    stories: list[Story] = field(default_factory=list)
    pages_fetched: int = 0
    duration_seconds: float = 0.0

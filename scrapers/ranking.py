from __future__ import annotations

import re
from collections.abc import Iterable

from core.models import Story

_SCORE_RE = re.compile(r"-?\d+")


def score_value(story: Story) -> int:
    """Integer value of the rendered score; unreadable scores count as 0."""
    match = _SCORE_RE.search(story.score)
    return int(match.group()) if match else 0


def sort_by_score_descending(stories: Iterable[Story]) -> list[Story]:
    """Return a new list, highest score first. Ties keep their input order."""
    return sorted(stories, key=score_value, reverse=True)

"""Turns one listing element into a :class:`Story`."""

from __future__ import annotations

import asyncio
import re

from core.exceptions import ExtractionError
from core.models import Story
from scrapers.base import ListingElement

# Markup of a single entry under the listing container.
LINK_SELECTOR = ".link a"
SCORE_SELECTOR = ".score"
TAG_SELECTOR = ".tags a"
BYLINE_SELECTOR = ".byline"
COMMENTS_SELECTOR = ".comments_label a"

UNKNOWN_USER = "unknown"

_BYLINE_RE = re.compile(r"écrit par\s+(.+?)\s+il y a")
_DIGITS_RE = re.compile(r"\d+")


def parse_username(byline: str) -> str:
    """``"écrit par alice il y a 3 heures"`` -> ``"alice"``."""
    match = _BYLINE_RE.search(" ".join(byline.split()))
    return match.group(1) if match else UNKNOWN_USER


def parse_comment_count(label: str) -> int:
    match = _DIGITS_RE.search(label)
    return int(match.group()) if match else 0


async def _title(el: ListingElement) -> str:
    return (await el.text_of(LINK_SELECTOR)).strip()


async def _url(el: ListingElement) -> str:
    return await el.href_of(LINK_SELECTOR)


async def _score(el: ListingElement) -> str:
    return (await el.text_of(SCORE_SELECTOR)).strip()


async def _tags(el: ListingElement) -> tuple[str, ...]:
    tags = await el.texts_of(TAG_SELECTOR)
    return tuple(t.strip() for t in tags)


async def _username(el: ListingElement) -> str:
    return parse_username(await el.text_of(BYLINE_SELECTOR))


async def _comments(el: ListingElement) -> int:
    return parse_comment_count(await el.text_of(COMMENTS_SELECTOR))


async def extract_story(el: ListingElement) -> Story:
    """Read all six fields concurrently.

    A field that is present but empty falls back to its default. A field
    whose element is missing fails the whole item with ExtractionError;
    any other sub-read error fails it with that error.
    """
    results = await asyncio.gather(
        _title(el),
        _url(el),
        _score(el),
        _tags(el),
        _username(el),
        _comments(el),
        return_exceptions=True,
    )
    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        # Driver faults outrank a missing sub-element
        fatal = [e for e in errors if not isinstance(e, ExtractionError)]
        raise (fatal or errors)[0]

    title, url, score, tags, username, comments = results
    return Story(
        title=title,
        url=url,
        score=score,
        tags=tags,
        comments=comments,
        username=username,
    )

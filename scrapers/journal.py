"""Pagination engine for journalduhacker.net listings.

Pages are produced lazily by :func:`iter_pages` and folded into an
immutable :class:`Accumulation` until enough stories are collected or the
site runs out of pages.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, aclosing
from dataclasses import dataclass

from config.settings import settings
from core.exceptions import ExtractionError, PageFetchError
from core.models import CollectResult, QueryMode, Story
from scrapers.base import ListingElement, PageDriver
from scrapers.browser import open_browser
from scrapers.extractor import extract_story
from scrapers.fetcher import fetch_listing
from scrapers.urls import build_url

log = logging.getLogger(__name__)

DriverFactory = Callable[[], AbstractAsyncContextManager[PageDriver]]


@dataclass(frozen=True)
class ListingPage:
    index: int
    url: str
    elements: list[ListingElement]


@dataclass(frozen=True)
class Accumulation:
    stories: tuple[Story, ...] = ()
    pages: int = 0

    def absorb(self, stories: Sequence[Story]) -> Accumulation:
        return Accumulation(self.stories + tuple(stories), self.pages + 1)


def wait_for_mode(mode: QueryMode) -> int | None:
    """Newest always has a listing, so it keeps the driver's default wait."""
    if mode is QueryMode.NEWEST:
        return None
    return settings.LISTING_WAIT_MS


async def iter_pages(
    driver: PageDriver,
    mode: QueryMode,
    parameter: str | None,
    *,
    wait_ms: int | None,
    max_pages: int = 0,
) -> AsyncIterator[ListingPage]:
    """Yield non-empty listing pages starting at 1.

    Stops at the first page that is missing, fails to load or is empty.
    """
    for index in itertools.count(1):
        if max_pages and index > max_pages:
            log.info("%s: page ceiling of %d reached", mode.value, max_pages)
            return
        url = build_url(mode, parameter, index)
        try:
            elements = await fetch_listing(driver, url, wait_ms)
        except PageFetchError as e:
            log.info("%s: no more results at page %d (%s)", mode.value, index, e.reason)
            return
        if not elements:
            log.info("%s: page %d is empty", mode.value, index)
            return
        yield ListingPage(index=index, url=url, elements=elements)


async def extract_page(
    driver: PageDriver, elements: Sequence[ListingElement]
) -> list[Story]:
    """Extract every element concurrently, dropping the ones that fail.

    A failed item is only fatal when the driver itself has gone away.
    """
    results = await asyncio.gather(
        *(extract_story(el) for el in elements), return_exceptions=True
    )
    stories: list[Story] = []
    for position, result in enumerate(results):
        if isinstance(result, ExtractionError):
            log.warning("Dropped listing item %d: %s", position, result)
            continue
        if isinstance(result, Exception) and driver.is_alive():
            log.warning(
                "Dropped listing item %d: %s: %s",
                position, type(result).__name__, result,
            )
            continue
        if isinstance(result, BaseException):
            raise result
        stories.append(result)
    return stories


async def accumulate(
    driver: PageDriver,
    mode: QueryMode,
    parameter: str | None,
    count: int,
    *,
    max_pages: int | None = None,
) -> Accumulation:
    acc = Accumulation()
    if count <= 0:
        return acc
    mode = QueryMode(mode)
    wait_ms = wait_for_mode(mode)
    if max_pages is None:
        max_pages = settings.MAX_PAGES

    pages = iter_pages(driver, mode, parameter, wait_ms=wait_ms, max_pages=max_pages)
    async with aclosing(pages):
        async for page in pages:
            wanted = page.elements[: count - len(acc.stories)]
            acc = acc.absorb(await extract_page(driver, wanted))
            log.info(
                "%s page %d: %d/%d stories", mode.value, page.index,
                len(acc.stories), count,
            )
            if len(acc.stories) >= count:
                break
    return Accumulation(acc.stories[:count], acc.pages)


async def collect(
    driver: PageDriver,
    mode: QueryMode,
    parameter: str | None,
    count: int,
    *,
    max_pages: int | None = None,
) -> list[Story]:
    """Walk listing pages on *driver* until *count* stories are collected."""
    acc = await accumulate(driver, mode, parameter, count, max_pages=max_pages)
    return list(acc.stories)


class JournalScraper:
    """Public entry points. Each call owns a fresh browser for its duration."""

    def __init__(self, driver_factory: DriverFactory = open_browser) -> None:
        self._driver_factory = driver_factory

    async def get_newest(self, count: int) -> list[Story]:
        return (await self.run(QueryMode.NEWEST, None, count)).stories

    async def search_by_tag(self, tag: str, count: int) -> list[Story]:
        return (await self.run(QueryMode.TAG, tag, count)).stories

    async def search_by_text(self, query: str, count: int) -> list[Story]:
        return (await self.run(QueryMode.SEARCH, query, count)).stories

    async def run(
        self, mode: QueryMode, parameter: str | None, count: int
    ) -> CollectResult:
        mode = QueryMode(mode)
        if mode is not QueryMode.NEWEST and not parameter:
            raise ValueError(f"{mode.value} mode needs a parameter")

        start = time.monotonic()
        if count <= 0:
            return CollectResult(mode=mode, parameter=parameter, requested=count)

        async with self._driver_factory() as driver:
            acc = await accumulate(driver, mode, parameter, count)

        elapsed = time.monotonic() - start
        log.info(
            "Finished %s%s: %d/%d stories | %d pages | %.1fs",
            mode.value,
            f" '{parameter}'" if parameter else "",
            len(acc.stories),
            count,
            acc.pages,
            elapsed,
        )
        return CollectResult(
            mode=mode,
            parameter=parameter,
            requested=count,
            stories=list(acc.stories),
            pages_fetched=acc.pages,
            duration_seconds=elapsed,
        )

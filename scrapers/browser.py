"""Playwright-backed page driver.

One Chromium instance, one context and one page per ``open_browser`` block.
Heavy resources are aborted at the routing layer, native dialogs are
dismissed as soon as they open, and ``navigator.webdriver`` reports
``false`` so the site serves its regular markup.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from contextlib import asynccontextmanager
from typing import Any, NoReturn

from playwright.async_api import (
    Browser,
    Dialog,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Route,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from config.settings import settings
from core.exceptions import ExtractionError, ListingNotFound, NavigationError
from scrapers.base import ListingElement, PageDriver

log = logging.getLogger(__name__)

WEBDRIVER_SPOOF_SCRIPT = (
    "Object.defineProperty(navigator, 'webdriver', { get: () => false });"
)


def _split(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class PlaywrightElement(ListingElement):
    def __init__(self, handle: ElementHandle, browser: Browser) -> None:
        self._handle = handle
        self._browser = browser

    def _item_failed(self, selector: str, e: PlaywrightError) -> NoReturn:
        # A detached or disposed node only costs this item
        if not self._browser.is_connected():
            raise e
        raise ExtractionError(f"{selector!r}: {e}") from e

    async def _first(self, selector: str) -> ElementHandle:
        try:
            node = await self._handle.query_selector(selector)
        except PlaywrightError as e:
            self._item_failed(selector, e)
        if node is None:
            raise ExtractionError(f"no element matches {selector!r}")
        return node

    async def text_of(self, selector: str) -> str:
        node = await self._first(selector)
        try:
            return await node.text_content() or ""
        except PlaywrightError as e:
            self._item_failed(selector, e)

    async def href_of(self, selector: str) -> str:
        node = await self._first(selector)
        try:
            # The DOM property resolves relative hrefs against the page URL
            return await node.evaluate("a => a.href") or ""
        except PlaywrightError as e:
            self._item_failed(selector, e)

    async def texts_of(self, selector: str) -> list[str]:
        try:
            return await self._handle.eval_on_selector_all(
                selector, "nodes => nodes.map(n => n.textContent || '')"
            )
        except PlaywrightError as e:
            self._item_failed(selector, e)


class PlaywrightDriver(PageDriver):
    def __init__(self, page: Page, browser: Browser) -> None:
        self._page = page
        self._browser = browser

    def is_alive(self) -> bool:
        return self._browser.is_connected()

    def _page_failed(self, url: str, e: PlaywrightError) -> NoReturn:
        if not self._browser.is_connected():
            raise e
        raise NavigationError(url, str(e)) from e

    async def goto(self, url: str) -> None:
        try:
            await self._page.goto(url)
        except PlaywrightError as e:
            self._page_failed(url, e)

    async def wait_for(self, selector: str, timeout_ms: int | None = None) -> None:
        try:
            if timeout_ms is None:
                await self._page.wait_for_selector(selector)
            else:
                await self._page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ListingNotFound(self._page.url, f"{selector!r} did not appear") from e
        except PlaywrightError as e:
            # e.g. a redirect destroying the execution context mid-wait
            self._page_failed(self._page.url, e)

    async def query_all(self, selector: str) -> list[ListingElement]:
        try:
            handles = await self._page.query_selector_all(selector)
        except PlaywrightError as e:
            self._page_failed(self._page.url, e)
        return [PlaywrightElement(h, self._browser) for h in handles]


def block_resources(
    resource_types: frozenset[str],
) -> Callable[[Route], Coroutine[Any, Any, None]]:
    """Build a route handler aborting requests of the given resource types."""

    async def handle(route: Route) -> None:
        request = route.request
        if request.resource_type in resource_types:
            log.debug("Blocked %s request: %s", request.resource_type, request.url)
            await route.abort()
        else:
            await route.continue_()

    return handle


async def dismiss_dialog(dialog: Dialog) -> None:
    log.debug("Dismissing %s dialog: %s", dialog.type, dialog.message)
    await dialog.dismiss()


@asynccontextmanager
async def open_browser() -> AsyncIterator[PlaywrightDriver]:
    """Launch a browser for the duration of one top-level call."""
    blocked = frozenset(_split(settings.BLOCKED_RESOURCE_TYPES))

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(
            headless=settings.BROWSER_HEADLESS,
            args=_split(settings.BROWSER_ARGS),
        )
        try:
            page = await browser.new_page()
            page.set_default_timeout(settings.NAVIGATION_TIMEOUT_MS)
            await page.route("**/*", block_resources(blocked))
            page.on("dialog", dismiss_dialog)
            await page.add_init_script(WEBDRIVER_SPOOF_SCRIPT)
            log.debug("Browser ready (blocking: %s)", ", ".join(sorted(blocked)))
            yield PlaywrightDriver(page, browser)
        finally:
            await browser.close()

"""Tests for the Playwright page driver.

Mocking strategy:
- Playwright objects are replaced with ``MagicMock`` / ``AsyncMock`` so no
  browser binary is needed.
- ``async_playwright`` is patched in ``scrapers.browser`` to check how the
  browser is launched, configured and released.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.exceptions import ExtractionError, ListingNotFound, NavigationError
from scrapers.browser import (
    WEBDRIVER_SPOOF_SCRIPT,
    PlaywrightDriver,
    PlaywrightElement,
    block_resources,
    dismiss_dialog,
    open_browser,
)

pytestmark = pytest.mark.asyncio


def _page() -> MagicMock:
    page = MagicMock()
    page.url = "https://www.journalduhacker.net/t/rust/page/2"
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.query_selector_all = AsyncMock(return_value=[])
    page.route = AsyncMock()
    page.add_init_script = AsyncMock()
    return page


def _browser(connected: bool = True) -> MagicMock:
    browser = MagicMock()
    browser.is_connected.return_value = connected
    browser.close = AsyncMock()
    return browser


class TestPlaywrightElement:
    async def test_text_of(self) -> None:
        node = MagicMock()
        node.text_content = AsyncMock(return_value=" Titre ")
        handle = MagicMock()
        handle.query_selector = AsyncMock(return_value=node)

        assert await PlaywrightElement(handle, _browser()).text_of(".link a") == " Titre "
        handle.query_selector.assert_awaited_once_with(".link a")

    async def test_text_of_null_content(self) -> None:
        node = MagicMock()
        node.text_content = AsyncMock(return_value=None)
        handle = MagicMock()
        handle.query_selector = AsyncMock(return_value=node)

        assert await PlaywrightElement(handle, _browser()).text_of(".score") == ""

    async def test_missing_element_raises_extraction_error(self) -> None:
        handle = MagicMock()
        handle.query_selector = AsyncMock(return_value=None)

        with pytest.raises(ExtractionError):
            await PlaywrightElement(handle, _browser()).href_of(".link a")

    async def test_href_reads_resolved_property(self) -> None:
        node = MagicMock()
        node.evaluate = AsyncMock(return_value="https://example.com/x")
        handle = MagicMock()
        handle.query_selector = AsyncMock(return_value=node)

        assert await PlaywrightElement(handle, _browser()).href_of(".link a") == "https://example.com/x"
        node.evaluate.assert_awaited_once_with("a => a.href")

    async def test_texts_of(self) -> None:
        handle = MagicMock()
        handle.eval_on_selector_all = AsyncMock(return_value=["linux", "web"])

        assert await PlaywrightElement(handle, _browser()).texts_of(".tags a") == ["linux", "web"]

    async def test_detached_node_becomes_extraction_error(self) -> None:
        handle = MagicMock()
        handle.query_selector = AsyncMock(
            side_effect=PlaywrightError("Element is not attached to the DOM")
        )

        with pytest.raises(ExtractionError, match="not attached"):
            await PlaywrightElement(handle, _browser()).text_of(".score")

    async def test_failed_evaluation_becomes_extraction_error(self) -> None:
        node = MagicMock()
        node.evaluate = AsyncMock(side_effect=PlaywrightError("JSHandle is disposed"))
        handle = MagicMock()
        handle.query_selector = AsyncMock(return_value=node)

        with pytest.raises(ExtractionError):
            await PlaywrightElement(handle, _browser()).href_of(".link a")

    async def test_read_with_dead_browser_propagates(self) -> None:
        handle = MagicMock()
        handle.eval_on_selector_all = AsyncMock(side_effect=PlaywrightError("Target closed"))

        with pytest.raises(PlaywrightError) as exc_info:
            await PlaywrightElement(handle, _browser(connected=False)).texts_of(".tags a")
        assert not isinstance(exc_info.value, ExtractionError)


class TestPlaywrightDriver:
    async def test_goto(self) -> None:
        page = _page()
        await PlaywrightDriver(page, _browser()).goto("https://example.com")
        page.goto.assert_awaited_once_with("https://example.com")

    async def test_goto_failure_becomes_navigation_error(self) -> None:
        page = _page()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as exc_info:
            await PlaywrightDriver(page, _browser()).goto("https://example.com")
        assert exc_info.value.url == "https://example.com"

    async def test_goto_failure_with_dead_browser_propagates(self) -> None:
        page = _page()
        page.goto.side_effect = PlaywrightError("Target closed")

        with pytest.raises(PlaywrightError):
            await PlaywrightDriver(page, _browser(connected=False)).goto("https://example.com")

    async def test_bounded_wait(self) -> None:
        page = _page()
        await PlaywrightDriver(page, _browser()).wait_for("#inside ol li", 1000)
        page.wait_for_selector.assert_awaited_once_with("#inside ol li", timeout=1000)

    async def test_unbounded_wait_uses_default(self) -> None:
        page = _page()
        await PlaywrightDriver(page, _browser()).wait_for("#inside ol li")
        page.wait_for_selector.assert_awaited_once_with("#inside ol li")

    async def test_wait_timeout_becomes_listing_not_found(self) -> None:
        page = _page()
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 1000ms exceeded")

        with pytest.raises(ListingNotFound) as exc_info:
            await PlaywrightDriver(page, _browser()).wait_for("#inside ol li", 1000)
        assert exc_info.value.url == page.url

    async def test_query_all_wraps_handles(self) -> None:
        page = _page()
        page.query_selector_all.return_value = [MagicMock(), MagicMock()]

        elements = await PlaywrightDriver(page, _browser()).query_all("#inside ol li")
        assert len(elements) == 2
        assert all(isinstance(e, PlaywrightElement) for e in elements)

    async def test_destroyed_context_while_waiting_becomes_navigation_error(self) -> None:
        page = _page()
        page.wait_for_selector.side_effect = PlaywrightError(
            "Execution context was destroyed, most likely because of a navigation"
        )

        with pytest.raises(NavigationError) as exc_info:
            await PlaywrightDriver(page, _browser()).wait_for("#inside ol li", 1000)
        assert exc_info.value.url == page.url

    async def test_wait_with_dead_browser_propagates(self) -> None:
        page = _page()
        page.wait_for_selector.side_effect = PlaywrightError("Target closed")

        with pytest.raises(PlaywrightError) as exc_info:
            await PlaywrightDriver(page, _browser(connected=False)).wait_for("#inside ol li")
        assert not isinstance(exc_info.value, NavigationError)

    async def test_query_all_failure_becomes_navigation_error(self) -> None:
        page = _page()
        page.query_selector_all.side_effect = PlaywrightError("Execution context was destroyed")

        with pytest.raises(NavigationError):
            await PlaywrightDriver(page, _browser()).query_all("#inside ol li")

    async def test_is_alive_follows_browser(self) -> None:
        assert PlaywrightDriver(_page(), _browser()).is_alive() is True
        assert PlaywrightDriver(_page(), _browser(connected=False)).is_alive() is False


class TestRequestBlocking:
    @pytest.mark.parametrize("resource_type", ["image", "stylesheet", "font", "media"])
    async def test_heavy_resources_aborted(self, resource_type: str) -> None:
        route = MagicMock()
        route.request.resource_type = resource_type
        route.abort = AsyncMock()
        route.continue_ = AsyncMock()

        handler = block_resources(frozenset({"image", "stylesheet", "font", "media"}))
        await handler(route)

        route.abort.assert_awaited_once()
        route.continue_.assert_not_awaited()

    @pytest.mark.parametrize("resource_type", ["document", "script", "xhr"])
    async def test_other_resources_continue(self, resource_type: str) -> None:
        route = MagicMock()
        route.request.resource_type = resource_type
        route.abort = AsyncMock()
        route.continue_ = AsyncMock()

        await block_resources(frozenset({"image"}))(route)

        route.continue_.assert_awaited_once()
        route.abort.assert_not_awaited()


async def test_dialogs_are_dismissed() -> None:
    dialog = MagicMock()
    dialog.dismiss = AsyncMock()

    await dismiss_dialog(dialog)
    dialog.dismiss.assert_awaited_once()


class TestOpenBrowser:
    def _playwright(self, browser: MagicMock) -> MagicMock:
        pw = MagicMock()
        pw.chromium.launch = AsyncMock(return_value=browser)
        cm = MagicMock()
        cm.__aenter__ = AsyncMock(return_value=pw)
        cm.__aexit__ = AsyncMock(return_value=False)
        return cm

    async def test_configures_page_and_releases_browser(self) -> None:
        page = _page()
        browser = _browser()
        browser.new_page = AsyncMock(return_value=page)
        cm = self._playwright(browser)

        with patch("scrapers.browser.async_playwright", return_value=cm):
            async with open_browser() as driver:
                assert isinstance(driver, PlaywrightDriver)

        launch_kwargs = cm.__aenter__.return_value.chromium.launch.call_args.kwargs
        assert launch_kwargs["headless"] is True
        assert "--no-sandbox" in launch_kwargs["args"]
        page.route.assert_awaited_once()
        assert page.route.call_args.args[0] == "**/*"
        page.on.assert_called_once_with("dialog", dismiss_dialog)
        page.add_init_script.assert_awaited_once_with(WEBDRIVER_SPOOF_SCRIPT)
        browser.close.assert_awaited_once()

    async def test_browser_released_on_error(self) -> None:
        browser = _browser()
        browser.new_page = AsyncMock(return_value=_page())

        with patch("scrapers.browser.async_playwright", return_value=self._playwright(browser)):
            with pytest.raises(RuntimeError):
                async with open_browser():
                    raise RuntimeError("boom")

        browser.close.assert_awaited_once()

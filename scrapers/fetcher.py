from __future__ import annotations

import logging

from scrapers.base import ListingElement, PageDriver

log = logging.getLogger(__name__)

LISTING_SELECTOR = "#inside ol li"


async def fetch_listing(
    driver: PageDriver, url: str, wait_ms: int | None
) -> list[ListingElement]:
    """Load *url* and return its listing elements.

    Raises ListingNotFound when the container does not show up within
    *wait_ms* (``None`` defers to the driver default), and NavigationError
    when the page cannot be loaded at all.
    """
    await driver.goto(url)
    await driver.wait_for(LISTING_SELECTOR, wait_ms)
    elements = await driver.query_all(LISTING_SELECTOR)
    log.debug("%s: %d listing elements", url, len(elements))
    return elements

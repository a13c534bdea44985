from __future__ import annotations


class ScraperError(Exception):
    """Base class for recoverable scraping failures."""


class ExtractionError(ScraperError):
    """A listing element could not be turned into a Story."""


class PageFetchError(ScraperError):
    """A listing page could not be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ListingNotFound(PageFetchError):
    """The listing container did not appear within the wait bound."""


class NavigationError(PageFetchError):
    """Navigation failed while the browser itself is still usable."""

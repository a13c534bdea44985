from __future__ import annotations

from abc import ABC, abstractmethod


class ListingElement(ABC):
    """One listing node, read through selectors scoped to it."""

    @abstractmethod
    async def text_of(self, selector: str) -> str:
        """Text content of the first match.

        Raises ExtractionError when nothing matches.
        """
        ...

    @abstractmethod
    async def href_of(self, selector: str) -> str:
        """Absolute link target of the first match.

        Raises ExtractionError when nothing matches.
        """
        ...

    @abstractmethod
    async def texts_of(self, selector: str) -> list[str]:
        """Text content of every match, in document order."""
        ...


class PageDriver(ABC):
    """The browser capabilities the pagination engine relies on.

    One driver owns one page; navigation replaces whatever was loaded.
    """

    @abstractmethod
    def is_alive(self) -> bool:
        """False once the underlying browser is gone."""
        ...

    @abstractmethod
    async def goto(self, url: str) -> None:
        """Raises NavigationError when the page cannot be loaded."""
        ...

    @abstractmethod
    async def wait_for(self, selector: str, timeout_ms: int | None = None) -> None:
        """Block until *selector* matches.

        ``None`` uses the driver's default timeout. Raises ListingNotFound
        when the bound expires.
        """
        ...

    @abstractmethod
    async def query_all(self, selector: str) -> list[ListingElement]:
        ...

from __future__ import annotations

from urllib.parse import quote

from config.settings import settings
from core.models import QueryMode


def build_url(
    mode: QueryMode | str,
    parameter: str | None,
    page_index: int,
    base_url: str | None = None,
) -> str:
    """Return the listing URL for *mode* at *page_index* (1-based).

    Tag names go into the path verbatim; search text is percent-encoded.
    """
    mode = QueryMode(mode)
    if page_index < 1:
        raise ValueError(f"page index must be >= 1, got {page_index}")
    base = (base_url or settings.BASE_URL).rstrip("/")

    if mode is QueryMode.NEWEST:
        return f"{base}/newest/page/{page_index}"

    if not parameter:
        raise ValueError(f"{mode.value} mode needs a parameter")
    if mode is QueryMode.TAG:
        return f"{base}/t/{parameter}/page/{page_index}"
    return (
        f"{base}/search?utf8=✓&q={quote(parameter, safe='')}"
        f"&what=all&order=relevance&page={page_index}"
    )

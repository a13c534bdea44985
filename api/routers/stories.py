from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from config.settings import settings
from core.models import CollectResult, QueryMode
from scrapers.journal import JournalScraper
from scrapers.ranking import sort_by_score_descending

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stories", tags=["stories"])

MAX_COUNT = 500


def get_scraper() -> JournalScraper:
    return JournalScraper()


def _result_to_dict(result: CollectResult, sort: str) -> dict:
    stories = result.stories
    if sort == "score":
        stories = sort_by_score_descending(stories)
    return {
        "mode": result.mode.value,
        "parameter": result.parameter,
        "requested": result.requested,
        "returned": len(stories),
        "pages_fetched": result.pages_fetched,
        "duration_seconds": round(result.duration_seconds, 2),
        "stories": [asdict(s) for s in stories],
    }


async def _run(
    scraper: JournalScraper, mode: QueryMode, parameter: str | None, count: int, sort: str
) -> dict:
    try:
        result = await scraper.run(mode, parameter, count)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except Exception as e:
        log.error("Scrape failed for %s: %s", mode.value, e)
        raise HTTPException(502, f"Scrape failed: {e}")
    return _result_to_dict(result, sort)


@router.get("/newest")
async def newest(
    count: int = Query(settings.DEFAULT_STORY_COUNT, ge=0, le=MAX_COUNT),
    sort: str = Query("none", pattern="^(none|score)$"),
    scraper: JournalScraper = Depends(get_scraper),
):
    return await _run(scraper, QueryMode.NEWEST, None, count, sort)


@router.get("/tags/{tag}")
async def by_tag(
    tag: str,
    count: int = Query(settings.DEFAULT_STORY_COUNT, ge=0, le=MAX_COUNT),
    sort: str = Query("none", pattern="^(none|score)$"),
    scraper: JournalScraper = Depends(get_scraper),
):
    return await _run(scraper, QueryMode.TAG, tag, count, sort)


@router.get("/search")
async def search(
    q: str = Query(..., min_length=1),
    count: int = Query(settings.DEFAULT_STORY_COUNT, ge=0, le=MAX_COUNT),
    sort: str = Query("none", pattern="^(none|score)$"),
    scraper: JournalScraper = Depends(get_scraper),
):
    return await _run(scraper, QueryMode.SEARCH, q, count, sort)

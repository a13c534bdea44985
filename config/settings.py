from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Target site
    BASE_URL: str = "https://www.journalduhacker.net"

    # Server
    API_PORT: int = 8001
    LOG_LEVEL: str = "INFO"

    # Browser
    BROWSER_HEADLESS: bool = True
    BROWSER_ARGS: str = "--no-sandbox"
    BLOCKED_RESOURCE_TYPES: str = "image,stylesheet,font,media"
    NAVIGATION_TIMEOUT_MS: int = 30000

    # Pagination
    LISTING_WAIT_MS: int = 1000  # tag and search pages only
    MAX_PAGES: int = 0  # 0 means no ceiling
    DEFAULT_STORY_COUNT: int = 25

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

"""Engine settings loaded from environment variables.

Defines all environment-driven configuration used by the extraction engine.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration model for the engine."""

    # Static fetch
    HTTP_TIMEOUT_SECONDS: float = 20.0
    HTTP_RACE_TIMEOUT_SECONDS: float = 25.0
    HTTP_MAX_REDIRECTS: int = 3
    USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: str = "tr-TR,tr;q=0.9,en;q=0.8"

    # Rendered fetch
    RENDERING_ENABLED: bool = True
    RENDER_NAVIGATION_TIMEOUT_MS: int = 20000
    RENDER_NAVIGATION_ATTEMPTS: int = 3
    RENDER_RETRY_DELAY_SECONDS: float = 2.0
    RENDER_SETTLE_SECONDS: float = 2.0
    RENDER_BUDGET_SECONDS: float = 75.0
    RENDER_VIEWPORT_WIDTH: int = 1920
    RENDER_VIEWPORT_HEIGHT: int = 1080
    PAGE_CLOSE_TIMEOUT_SECONDS: float = 5.0
    BROWSER_CLOSE_TIMEOUT_SECONDS: float = 10.0
    BROWSER_POOL_SIZE: int = 3

    # Batch orchestration
    BATCH_WINDOW_SIZE: int = 2
    BATCH_DELAY_SECONDS: float = 1.0

    DEFAULT_CURRENCY: str = "TL"
    SITE_PROFILES_PATH: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

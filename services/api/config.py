"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App
    app_name: str = "streetvoice-api"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"]
    )

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Report store (JSON files, one per key)
    data_dir: str = "data"
    autosave: bool = True
    storage_quota_bytes: int = 5 * 1024 * 1024  # 5MB, same as a browser origin
    import_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    # Reddit public JSON endpoints
    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = "StreetVoice/1.0 (city reports dashboard)"
    reddit_min_request_interval_s: float = Field(default=3.0, ge=0.0)
    reddit_rate_limit_retry_delay_s: float = Field(default=60.0, ge=0.0)
    reddit_max_backoff_s: float = Field(default=300.0, ge=0.0)
    reddit_max_retries: int = Field(default=3, ge=0)
    reddit_timeout_s: float = 30.0

    # Normalization
    district_fallback: str = Field(default="random", pattern=r"^(random|unknown)$")
    random_seed: int | None = None

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()

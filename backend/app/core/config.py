from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "QuickBill Analytics API"
    api_prefix: str = "/api/v1"
    debug: bool = False
    auto_create_schema: bool = True
    seed_demo_data: bool = False

    database_url: str = "sqlite+pysqlite:///./quickbill.db"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60

    analytics_cache_ttl_seconds: int = 300
    default_window_days: int = 90
    forecast_periods: int = 12
    demo_fallback_enabled: bool = False
    demo_account_id: str = "demo-account"
    demo_seed: int = 20250815

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()

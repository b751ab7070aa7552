from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "Asia/Ho_Chi_Minh"

    STORE_PROVIDER: str = "memory"  # "memory" | "http"
    BOOKING_API_BASE_URL: str | None = None
    BOOKING_API_TOKEN: str | None = None
    BOOKING_API_TIMEOUT_SECONDS: float = 10.0

    MONTH_CACHE_TTL_SECONDS: float = 600.0
    RANGE_CACHE_TTL_SECONDS: float = 120.0
    HOLIDAY_CACHE_TTL_SECONDS: float = 3600.0
    BOOKING_COMMIT_MAX_AGE_SECONDS: float = 30.0

    DEFAULT_MINIMUM_STAY: int = 1
    WEEKEND_DAYS: list[int] = [5]  # date.weekday(): Monday=0 ... Saturday=5


settings = Settings()

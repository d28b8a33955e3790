from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    BACKEND_BASE_URL: str | None = None
    BACKEND_API_TOKEN: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    # Page size requested from the active-professionals listing when the
    # booking-scoped lookup fails or comes back empty.
    FALLBACK_PAGE_LIMIT: int = 50

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    SEED_DEMO_DATA: bool = True


settings = Settings()

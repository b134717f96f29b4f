from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./holidays.sqlite"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # App
    APP_NAME: str = "Feriados API"
    DEBUG: bool = False

    # Holiday lookup cache
    HOLIDAY_CACHE_ENABLED: bool = True
    HOLIDAY_CACHE_TTL_SECONDS: float = 30.0
    CACHE_SWEEP_INTERVAL_SECONDS: float = 30.0

    # Region seed files (code,name CSV with header)
    SEED_ON_STARTUP: bool = True
    SEED_STATES_CSV: str = "estados.csv"
    SEED_MUNICIPALITIES_CSV: str = "municipios-2019.csv"


settings = Settings()

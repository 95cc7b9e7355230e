import os
from pathlib import Path

from dotenv import load_dotenv


# A local .env next to the `app` package is authoritative for development.
env_path = Path(__file__).resolve().parents[2] / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)


class Settings:
    """Lightweight settings loader using environment variables.

    Values are read once at import time; tests set the environment before
    importing the application.
    """

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-to-a-secure-random-string")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

    raw_db = os.getenv("DATABASE_URL", "sqlite:///./chanthana.db")
    # tolerate a duplicated prefix such as "DATABASE_URL=DATABASE_URL=..."
    if isinstance(raw_db, str) and raw_db.startswith("DATABASE_URL="):
        raw_db = raw_db.split("=", 1)[1]
    DATABASE_URL: str = raw_db

    APP_ENV: str = os.getenv("APP_ENV", os.getenv("ENV", "development")).lower()
    _default_pool_size = 5 if APP_ENV == "development" else 10
    _default_max_overflow = 2 if APP_ENV == "development" else 20
    _default_pool_recycle = 900 if APP_ENV == "development" else 1800

    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", str(_default_pool_size)))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", str(_default_max_overflow)))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", str(_default_pool_recycle)))  # seconds

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # Log pool events every N occurrences
    DB_LOG_EVERY_N: int = int(os.getenv("DB_LOG_EVERY_N", "50"))
    REQUEST_LOG_VERBOSE: bool = str(os.getenv("REQUEST_LOG_VERBOSE", "0")).strip().lower() in {"1", "true", "yes", "on"}
    # Comma-separated route prefixes to include for verbose logging
    REQUEST_LOG_INCLUDE_PREFIXES: str = os.getenv(
        "REQUEST_LOG_INCLUDE_PREFIXES",
        "/historique,/notifications,/commandes"
    )

    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )
    # Restaurant local time, used for date-only filters and quiet hours
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "Europe/Paris")


settings = Settings()

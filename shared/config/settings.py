import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Process configuration, read once from the environment at startup."""

    def __init__(self):
        db_user = os.getenv("POSTGRES_USER", "postgres")
        db_password = os.getenv("POSTGRES_PASSWORD", "postgres")
        db_host = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
        db_port = os.getenv("POSTGRES_PORT", "5433")
        db_name = os.getenv("POSTGRES_DB", "giftshop")

        self.database_url: str = os.getenv(
            "DATABASE_URL",
            f"postgresql+asyncpg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}",
        )
        self.sql_echo: bool = _as_bool(os.getenv("SQL_ECHO"), False)

        self.jwt_secret_key: str = os.getenv("JWT_SECRET_KEY", "")
        self.jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
        self.internal_api_key: str = os.getenv("INTERNAL_API_KEY", "")

        # "database" writes notifications in-process, "http" posts them to the notification service
        self.notification_sink: str = os.getenv("NOTIFICATION_SINK", "database").lower()
        self.notification_url: str = os.getenv("NOTIFICATION_URL", "http://localhost:8005")
        self.notification_timeout_seconds: float = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "2.0"))

        self.order_rate_limit: str = os.getenv("ORDER_RATE_LIMIT", "30/minute")
        self.rate_limit_enabled: bool = _as_bool(os.getenv("RATE_LIMIT_ENABLED"), True)

        self.tracing_enabled: bool = _as_bool(os.getenv("TRACING_ENABLED"), True)
        self.otlp_endpoint: str = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()

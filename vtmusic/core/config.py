import os
import logging.config
from pydantic import BaseModel


class Settings(BaseModel):
    service_name: str = os.getenv("SERVICE_NAME", "vtmusic")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./vtmusic.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_issuer: str = os.getenv("JWT_ISSUER", "https://auth.vtmusic.local")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "vtmusic.api")
    jwt_ttl_minutes: int = int(os.getenv("JWT_TTL_MINUTES", "20"))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "app_session_id")

    # comma-separated, e.g. "http://localhost:8081,https://my.dev.site"
    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "http://localhost:8081,http://127.0.0.1:8081")

    youtube_api_key: str = os.getenv("YOUTUBE_API_KEY", "")
    youtube_timeout_sec: float = float(os.getenv("YOUTUBE_TIMEOUT_SEC", "10.0"))

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()


# --- Logging -----------------------------------------------------------------
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": settings.log_level,
    },
}


def configure_logging() -> None:
    logging.config.dictConfig(LOGGING_CONFIG)

"""Application settings.

All environment reads happen here. The Settings struct is built once at
startup and handed to the token/cookie code through FastAPI dependencies
instead of being read ad hoc from os.environ.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30
    cookie_expire_days: int = 30
    environment: str = "development"
    mongo_url: str | None = None
    database_name: str = "storefront"
    cors_origins: str = "*"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def secure_cookies(self) -> bool:
        """Cookies are only marked Secure when serving over HTTPS in production."""
        return self.is_production

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("JWT_SECRET_KEY")
        if not secret:
            raise ValueError(
                "JWT_SECRET_KEY environment variable is required. "
                "Generate a secure key with: openssl rand -hex 32"
            )
        return cls(
            jwt_secret_key=secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "30")),
            cookie_expire_days=int(os.getenv("JWT_COOKIE_EXPIRE_DAYS", "30")),
            environment=os.getenv("ENVIRONMENT", "development"),
            mongo_url=os.getenv("MONGO_URL"),
            database_name=os.getenv("MONGODB_DATABASE", "storefront"),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings singleton (also used as a FastAPI dependency)."""
    return Settings.from_env()


def cors_config() -> tuple[str | list[str], bool]:
    """Parse CORS_ORIGINS into (origins, allow_credentials).

    Read separately from Settings so the app can be constructed before the
    JWT secret is available. Browsers reject credentials with a wildcard
    origin, so "*" disables them and the dashboard must then send the
    Bearer header instead of relying on the cookie.
    """
    raw = os.getenv("CORS_ORIGINS", "*").strip()
    if raw == "*" or not raw:
        return "*", False
    return [origin.strip() for origin in raw.split(",") if origin.strip()], True

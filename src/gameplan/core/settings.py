from __future__ import annotations

from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from gameplan.commons.exceptions import BaseCoreException

DEV_JWT_SECRET = "gameplan-dev-secret-change-in-production"


class ConfigurationException(BaseCoreException):
    pass


class Settings(BaseSettings):
    """
    App settings.

    Loads from environment variables and an optional local `.env` file.
    `.env` is gitignored.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    API_TITLE: str = "GamePlan API"
    API_VERSION: str = "1.0.0"
    API_PREFIX: str = ""

    APP_ENV: str = "development"  # development|production|test
    DEBUG: bool = False

    # Database (PostgreSQL via psycopg async driver)
    GAMEPLAN_DB_HOST: str = "localhost"
    GAMEPLAN_DB_PORT: int = 5432
    GAMEPLAN_DB_NAME: str = "gameplan_db"
    GAMEPLAN_DB_USER: str = "gameplan_user"
    GAMEPLAN_DB_PASSWORD: str = ""
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT_S: float = 2.0

    # Bearer tokens. Rotating JWT_SECRET invalidates every outstanding token.
    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "gameplan-api"
    JWT_AUDIENCE: str = "gameplan-client"
    JWT_EXPIRES_DAYS: int = 7
    JWT_REMEMBER_ME_DAYS: int = 30

    PASSWORD_HASH_ITERATIONS: int = 210_000

    # Optional second, revocable check alongside the bearer token.
    SESSION_HEADER: str = "X-Session-ID"

    # Per-user request budget (process-local, resets on restart)
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_S: float = 15 * 60
    RATE_LIMIT_MAX_USERS: int = 10_000
    # Per-client-address budget for unauthenticated routes (register, login)
    CLIENT_RATE_LIMIT_MAX_REQUESTS: int = 100
    CLIENT_RATE_LIMIT_WINDOW_S: float = 15 * 60
    CLIENT_RATE_LIMIT_MAX_CLIENTS: int = 10_000

    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"

    def is_debug(self) -> bool:
        # Stack traces are only ever exposed outside production.
        return bool(self.DEBUG) and not self.is_production()

    def validate_for_environment(self) -> None:
        if self.is_production() and self.JWT_SECRET == DEV_JWT_SECRET:
            raise ConfigurationException(
                "JWT_SECRET must be changed in production",
                "Set the JWT_SECRET environment variable",
            )


settings = Settings()

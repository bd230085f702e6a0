from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (SQLAlchemy URL, e.g. postgresql+psycopg2://...)
      - IDP_JWT_KEY (identity provider verification key: PEM public key
        for RS256, or a shared secret for HS256)
      - JWT_SECRET (signing secret for locally issued tokens)

    Optional:
      - IDP_ISSUER (checked against the "iss" claim when set)
      - ENFORCE_NON_NEGATIVE_STOCK (reject orders that would oversell)
    """

    PROJECT_NAME: str = "Storefront API"
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_SSL_REQUIRE: bool = False

    # External identity provider token verification
    IDP_JWT_KEY: str
    IDP_JWT_ALG: str = "RS256"
    IDP_ISSUER: str | None = None

    # Local email/password accounts
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "auth_token"
    AUTH_COOKIE_SECURE: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Orders
    ENFORCE_NON_NEGATIVE_STOCK: bool = False
    TRACKING_NUMBER_MAX_ATTEMPTS: int = 10

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

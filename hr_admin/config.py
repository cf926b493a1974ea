"""Application configuration via environment variables."""

import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    APP_VERSION: str = "1.0.0"
    CORS_ORIGINS: list[str] = ["*"]

    JWT_SECRET: str = "hr-management-secret-key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # bcrypt work factor
    BCRYPT_ROUNDS: int = 10
    SEED_ADMIN_PASSWORD: str = "admin123"

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()

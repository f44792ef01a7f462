"""
Configuration management for the Auth Service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict


class Settings(BaseSettings):
    """Auth Service configuration loaded from environment variables"""

    LOG_LEVEL: str = "INFO"

    # Credentials accepted without going through /token, e.g. {"abc": "u1"}
    STATIC_TOKENS: Dict[str, str] = {"abc": "u1"}

    # Bytes of randomness in issued tokens
    TOKEN_BYTES: int = 32

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()

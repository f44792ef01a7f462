"""
Configuration management for the Tasks Service
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Tasks Service configuration loaded from environment variables"""

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Record Store Configuration
    TASKS_FOLDER: str = "tasks"
    TASKS_FILE_NAME: str = "tasks.txt"

    # Auth Service Integration
    AUTH_ADDRESS: str = "auth-service.default"
    AUTH_TIMEOUT_SECONDS: float = 3.0

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def tasks_file_path(self) -> Path:
        return Path(self.TASKS_FOLDER) / self.TASKS_FILE_NAME

    @property
    def auth_base_url(self) -> str:
        """AUTH_ADDRESS may be a bare service DNS name or a full URL."""
        address = self.AUTH_ADDRESS.rstrip("/")
        if "://" in address:
            return address
        return f"http://{address}"


# Global settings instance
settings = Settings()

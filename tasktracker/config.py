"""Configuration settings using Pydantic BaseSettings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    database_path: Path = Field(default=Path("tasks.db"), description="SQLite database file")

    # Application Configuration
    app_host: str = Field(default="0.0.0.0", description="FastAPI host")
    app_port: int = Field(default=3001, description="FastAPI port")
    environment: str = Field(default="development", description="Deployment environment name")
    cors_origins: List[str] = Field(default=["*"], description="Origins allowed to call the API")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    # Client Configuration
    api_base_url: str = Field(default="http://localhost:3001", description="Base URL of the task API")

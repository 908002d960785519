"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite:///./training.db")
    DB_POOL_RECYCLE: int = Field(default=3600)  # 1 hour

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # json or text

    # Training engine tuning
    RECENT_SESSION_WINDOW: int = Field(default=5, ge=1)
    WEEKLY_COUNT_WEEKS: int = Field(default=4, ge=0)
    # Session history handed to the plan builder for variety checks
    PLAN_HISTORY_DAYS: int = Field(default=60, ge=1)

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    # e.g., "https://app.example.com,https://www.example.com"
    CORS_ORIGINS: Optional[str] = Field(default=None)

    @property
    def cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        if self.ENVIRONMENT == "production":
            return []
        return ["http://localhost:3000", "http://127.0.0.1:3000"]


settings = Settings()

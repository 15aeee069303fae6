"""
Application configuration management.
"""
from functools import lru_cache
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./ontologies.db"

    # Security
    SECRET_KEY: str = "dev-secret-change-me"
    AUTH_JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 5  # Tokens are short-lived and minted per request

    # Client
    ONTOLOGY_API_URL: str = "http://localhost:8000/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Graph database (optional)
    NEO4J_URI: Optional[str] = None
    NEO4J_USERNAME: Optional[str] = None
    NEO4J_PASSWORD: Optional[str] = None

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str) and v:
            return v
        raise ValueError("DATABASE_URL must be provided")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ["development", "local", "test", "production"]:
            raise ValueError("ENVIRONMENT must be one of: development, local, test, production")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra fields from .env file
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

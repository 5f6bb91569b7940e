"""
Configuration settings for the Block Engine
"""
import os
import logging
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

# Configure basic logger for config module
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Completion provider: "openai" (any OpenAI-compatible endpoint) or "anthropic"
    COMPLETION_PROVIDER: str = os.getenv("COMPLETION_PROVIDER", "openai")

    # API Keys
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")

    # OpenAI-compatible endpoint
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    GENERATION_MODEL: str = os.getenv("GENERATION_MODEL", "gpt-4o")
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")

    # Claude Models
    CLAUDE_MODEL: str = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-20250514")

    # Generation Settings
    MAX_TOKENS: int = 4000
    TEMPERATURE: float = 0.7
    COMPLETION_TIMEOUT: float = 120.0
    EMBEDDING_TIMEOUT: float = 30.0

    # Factory batch throttle between consecutive generations
    BATCH_DELAY_SECONDS: float = float(os.getenv("BATCH_DELAY_SECONDS", "2.0"))

    # Optional JSON rule file overriding the built-in code validation rules
    VALIDATION_RULES_FILE: Optional[str] = os.getenv("VALIDATION_RULES_FILE")

    # Data store (Supabase PostgREST + Auth)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "http://localhost:54321")
    SUPABASE_SERVICE_KEY: str = os.getenv("SUPABASE_SERVICE_KEY", "")
    SUPABASE_TIMEOUT: float = 15.0

    # Factory cron trigger
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")

    # Rate limits
    GENERATE_RATE_LIMIT: str = os.getenv("GENERATE_RATE_LIMIT", "10/minute")

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE: float = float(
        os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
    )

    # CORS - comma-separated list of allowed origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_required_config():
    """Validate required configuration on startup"""
    errors = []

    if settings.COMPLETION_PROVIDER == "anthropic":
        if not settings.ANTHROPIC_API_KEY:
            errors.append("ANTHROPIC_API_KEY must be configured when COMPLETION_PROVIDER=anthropic")
    elif not settings.OPENAI_API_KEY:
        errors.append("OPENAI_API_KEY must be configured")

    if not settings.SUPABASE_SERVICE_KEY:
        errors.append("SUPABASE_SERVICE_KEY must be configured")

    if not settings.CRON_SECRET:
        logger.warning("CRON_SECRET not configured, factory cron endpoint will reject all calls")

    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        if settings.ENVIRONMENT == "production":
            raise ValueError(f"Missing required configuration: {', '.join(errors)}")

    return len(errors) == 0

"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Secrets (API keys, database credentials) never live in the code base;
each environment (development, staging, production) provides its own values.
"""
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files
        database_url: SQLAlchemy connection string
        google_api_key: API key for Google Gemini service
        groq_api_key: Optional API key for the Groq fallback provider
        chat_model: Gemini model used for persona chat
        fallback_model: Groq model used when Gemini fails before streaming
        llm_temperature: LLM creativity (0.0 = deterministic, 1.0 = creative)
        llm_max_tokens: Maximum response length
        llm_timeout_seconds: Upper bound for one streamed completion
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_dir: str

    # Database settings
    database_url: str
    auto_create_tables: bool

    # LLM settings
    google_api_key: str
    groq_api_key: Optional[str]
    chat_model: str
    fallback_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: int

    # Safety settings
    rate_limit_per_minute: int
    enable_audit_logging: bool
    cors_origins: Tuple[str, ...]

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"

    @property
    def has_fallback_provider(self) -> bool:
        return bool(self.groq_api_key)


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_bool(key: str, default: str) -> bool:
    return _get_env(key, default).strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(database_url: str) -> str:
    """
    Rewrite provider-style URLs into ones SQLAlchemy understands.

    Hosted Postgres providers hand out ``postgres://`` URLs and MySQL
    providers add an ``ssl-mode`` parameter the pymysql driver rejects.
    """
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("mysql://"):
        database_url = database_url.replace("mysql://", "mysql+pymysql://", 1)

    if "ssl-mode=" in database_url:
        database_url = re.sub(r"[?&]ssl-mode=[^&]+", "", database_url)
        if "?" not in database_url and "&" in database_url:
            database_url = database_url.replace("&", "?", 1)

    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; maxsize=1 ensures only one
    instance exists. Tests call ``get_settings.cache_clear()`` after
    changing the environment.

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If required environment variables are missing
    """
    database_url = normalize_database_url(
        _get_env("DATABASE_URL", "sqlite:///./saaskit.db")
    )

    cors_origins = tuple(
        origin.strip()
        for origin in _get_env("CORS_ORIGINS", "").split(",")
        if origin.strip()
    )

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "SaasKit"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=_get_env("LOG_DIR", str(Path(__file__).parent.parent.parent / "logs")),

        # Database
        database_url=database_url,
        auto_create_tables=_get_bool("AUTO_CREATE_TABLES", "true"),

        # LLM
        google_api_key=_get_env("GOOGLE_API_KEY"),
        groq_api_key=os.environ.get("GROQ_API_KEY") or None,
        chat_model=_get_env("CHAT_MODEL", "gemini-2.5-flash-lite"),
        fallback_model=_get_env("FALLBACK_MODEL", "llama-3.1-8b-instant"),
        llm_temperature=float(_get_env("LLM_TEMPERATURE", "0.7")),
        llm_max_tokens=int(_get_env("LLM_MAX_TOKENS", "2048")),
        llm_timeout_seconds=int(_get_env("LLM_TIMEOUT_SECONDS", "30")),

        # Safety
        rate_limit_per_minute=int(_get_env("RATE_LIMIT_PER_MINUTE", "30")),
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", "true"),
        cors_origins=cors_origins,
    )

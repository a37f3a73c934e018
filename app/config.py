import os
import urllib.parse
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.errors import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and passed explicitly."""

    model_config = ConfigDict(frozen=True)

    jsearch_api_key: str = ""
    jsearch_api_host: str = "jsearch.p.rapidapi.com"
    jsearch_api_url: str = "https://jsearch.p.rapidapi.com/search"
    jsearch_timeout: float = Field(default=10.0, gt=0)

    database_url: str = "sqlite:///./jobs.db"

    default_max_pages: int = Field(default=1, ge=1)
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    log_level: str = "INFO"


def _database_url(env: Mapping[str, str]) -> str:
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]

    # Same DB_* variables the Postgres deployment has always used
    db_host = env.get("DB_HOST")
    if not db_host:
        return Settings.model_fields["database_url"].default

    db_user = env.get("DB_USER", "postgres")
    db_pass_raw = env.get("DB_PASS", "")
    db_port = env.get("DB_PORT", "5432")
    db_name = env.get("DB_NAME", "postgres")

    db_pass = urllib.parse.quote_plus(db_pass_raw) if db_pass_raw else ""
    if db_pass:
        return f"postgresql+psycopg2://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"
    return f"postgresql+psycopg2://{db_user}@{db_host}:{db_port}/{db_name}"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the process environment (after reading .env) or from
    an explicit mapping. Raises ConfigurationError listing every bad value.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    raw = {
        "jsearch_api_key": env.get("JSEARCH_API_KEY", ""),
        "database_url": _database_url(env),
    }
    optional = {
        "jsearch_api_host": "JSEARCH_API_HOST",
        "jsearch_api_url": "JSEARCH_API_URL",
        "jsearch_timeout": "JSEARCH_TIMEOUT",
        "default_max_pages": "DEFAULT_MAX_PAGES",
        "default_page_size": "DEFAULT_PAGE_SIZE",
        "max_page_size": "MAX_PAGE_SIZE",
        "log_level": "LOG_LEVEL",
    }
    for field, var in optional.items():
        if env.get(var):
            raw[field] = env[var]

    errors = []
    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{raw['log_level']}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )
    raw["log_level"] = log_level

    try:
        settings = Settings.model_validate(raw)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append(f"{optional.get(field, field.upper())}: {error['msg']}")
        settings = None

    if errors:
        raise ConfigurationError("Environment variable validation failed", errors=errors)

    if settings.default_page_size > settings.max_page_size:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=["DEFAULT_PAGE_SIZE must not exceed MAX_PAGE_SIZE"],
        )
    return settings

import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so env vars are available for YAML interpolation
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Path of the app.yaml in the working directory (may not exist)."""
    return Path.cwd() / "app.yaml"


def load_app_config(config_path: Path | None = None) -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = config_path or get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./formforge.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True
    echo: bool = False
    create_all: bool = False


class ApiConfig(BaseModel):
    """Pagination defaults for the JSON API."""

    default_form_limit: int = 10
    default_submission_limit: int = 50
    max_limit: int = 100
    recent_submissions: int = 10


class CORSSettings(BaseModel):
    """Origins allowed to call the API from a browser (empty disables CORS)."""

    allow_origins: list[str] = []


class LogfireConfig(BaseModel):
    enabled: bool = False
    service_name: str = "formforge"
    environment: str | None = None
    console: bool = False
    sample_rate: float = 1.0
    # Trace validation of the generated submission models
    instrument_pydantic: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False

    # Sections below are usually provided by app.yaml
    db: DatabaseConfig = DatabaseConfig()
    api: ApiConfig = ApiConfig()
    cors: CORSSettings = CORSSettings()
    logfire: LogfireConfig = LogfireConfig()


_SECTIONS = {
    "db": DatabaseConfig,
    "api": ApiConfig,
    "cors": CORSSettings,
    "logfire": LogfireConfig,
}


def build_settings(app_config: dict | None = None) -> Settings:
    """Create settings from the environment, overlaid with an app.yaml mapping."""
    base_settings = Settings()
    if not app_config:
        return base_settings

    updates = {}
    for key, model in _SECTIONS.items():
        if key in app_config:
            updates[key] = model(**(app_config[key] or {}))
    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return build_settings()

    return build_settings(app_config)

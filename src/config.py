"""
Configuration management for Mastodon Archive
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CACHE_LOCATION = ".cache/mastodon.json"

# Option names accepted from the site build, mapped to Settings fields
OPTION_ALIASES = {
    "host": "host",
    "userId": "user_id",
    "removeSyndicates": "remove_syndicates",
    "cacheLocation": "cache_location",
    "isProduction": "is_production",
    "stripHashtags": "strip_hashtags",
    "logLevel": "log_level",
}


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Archive settings, loaded from caller options and MASTODON_* variables"""

    # Mastodon account
    host: str = Field(default="", description="Base URL of the Mastodon server")
    user_id: str = Field(default="", description="Numeric Mastodon account id")

    # Archive behaviour
    remove_syndicates: List[str] = Field(
        default_factory=list,
        description="URL substrings marking posts already published on your own site",
    )
    cache_location: str = Field(
        default=DEFAULT_CACHE_LOCATION, description="Cache file path"
    )
    is_production: bool = Field(
        default=True, description="Fetch from the network (disable for dev builds)"
    )
    strip_hashtags: bool = Field(
        default=False, description="Move hashtag links out of post content"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = {
        "env_file": ".env",
        "env_prefix": "MASTODON_",
        "case_sensitive": False,
        "extra": "ignore",
        "frozen": True,
        "validate_default": True,
    }

    @field_validator("host")
    @classmethod
    def validate_host(cls, v):
        if not v or v == "https://your.instance":
            raise ValueError("No URL provided for the Mastodon server")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Mastodon host must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("user_id", mode="before")
    @classmethod
    def validate_user_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not v or v == "your-user-id":
            raise ValueError("No userID provided")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_location)


def options_to_fields(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate camelCase build options into Settings keyword arguments"""
    fields: Dict[str, Any] = {}
    for key, value in options.items():
        field = OPTION_ALIASES.get(key, key)
        if field not in Settings.model_fields:
            logger.warning(f"Ignoring unknown option: {key}")
            continue
        fields[field] = value
    return fields


def get_settings(options: Optional[Mapping[str, Any]] = None, **overrides) -> Settings:
    """Build settings from options, overrides and the environment.

    Options take precedence over environment variables and the .env file.

    Raises:
        ConfigurationError: when a required option is missing or invalid
    """
    fields = options_to_fields(options or {})
    fields.update(overrides)

    try:
        return Settings(**fields)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "invalid value")
            # pydantic prefixes messages raised from validators
            message = message.replace("Value error, ", "")
            problems.append(f"- {location}: {message}")

        raise ConfigurationError(
            "Configuration incomplete!\n\n"
            "Please provide these options (or the matching MASTODON_* "
            "environment variables):\n" + "\n".join(problems)
        ) from e

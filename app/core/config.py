"""Host bootstrap settings and the layered application settings resolver."""

import json
import logging
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Separators accepted in environment variable names for hierarchical keys,
# e.g. AppSettings__EnableHttpsRedirect or AppSettings:EnableHttpsRedirect.
ENV_KEY_SEPARATORS = ("__", ":")

DEVELOPMENT_ENV = "dev"

# Host log vocabulary -> stdlib logging levels. "None" disables a category.
LOG_LEVEL_NAMES = {
    "trace": logging.DEBUG,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "information": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "none": logging.CRITICAL + 1,
}


class ConfigLoadError(Exception):
    """Raised when a configuration layer is missing or malformed. Fatal at startup."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.source = source
        self.cause = cause
        super().__init__(message)


class HostSettings(BaseSettings):
    """Process-level knobs that locate and run the host, from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "prod"
    APP_SETTINGS_FILE: str = "appsettings.json"

    # Static assets and the SPA root document (relative to STATIC_DIR)
    STATIC_DIR: str = "wwwroot"
    INDEX_DOCUMENT: str = "index.html"

    HOST: str = "127.0.0.1"
    PORT: int = 5000

    # Only environment variables starting with this prefix form the override layer
    CONFIG_ENV_PREFIX: str = ""

    @field_validator("APP_SETTINGS_FILE", "STATIC_DIR", "INDEX_DOCUMENT", "HOST")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value must be set and non-empty")
        return v.strip()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v


@lru_cache
def get_host_settings() -> HostSettings:
    """Return cached host settings (read once per process)."""
    return HostSettings()


def _lower_alias(name: str) -> str:
    # enable_https_redirect -> enablehttpsredirect, matching EnableHttpsRedirect
    return name.replace("_", "").lower()


class _SettingsSection(BaseModel):
    """Base for sections of the layered settings document; keys are matched case-insensitively."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=_lower_alias,
        populate_by_name=True,
    )


class AppSettings(_SettingsSection):
    """The AppSettings section."""

    enable_https_redirect: bool = True


class LoggingSettings(_SettingsSection):
    """The Logging section: category -> level map, "default" for the root logger."""

    log_level: dict[str, int] = Field(default_factory=lambda: {"default": logging.INFO})
    include_scopes: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> dict[str, int]:
        if not isinstance(v, Mapping):
            raise ValueError("LogLevel must be an object mapping categories to levels")
        levels: dict[str, int] = {}
        for category, level in v.items():
            if isinstance(level, int) and not isinstance(level, bool):
                levels[str(category)] = level
                continue
            name = str(level).strip().lower()
            if name not in LOG_LEVEL_NAMES:
                raise ValueError(f"Unknown log level {level!r} for category {category!r}")
            levels[str(category)] = LOG_LEVEL_NAMES[name]
        return levels


class TelemetrySettings(_SettingsSection):
    """The ApplicationInsights section. Carried for completeness; no SDK is wired."""

    instrumentation_key: str | None = None
    developer_mode: bool = False


class Settings(_SettingsSection):
    """Immutable, fully resolved application settings. Built once per process."""

    app_settings: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    application_insights: TelemetrySettings = Field(default_factory=TelemetrySettings)
    environment: str = "prod"


def _lower_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def merge_layers(base: dict[str, Any], overlay: Mapping[str, Any], source: str) -> dict[str, Any]:
    """
    Overlay one configuration layer onto another, key by key and recursively.

    Both layers must already have lower-cased keys. A section cannot be replaced
    by a scalar (or the reverse); that raises ConfigLoadError naming the layer.
    """
    merged = dict(base)
    for key, value in overlay.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            merged[key] = merge_layers(existing, value, source)
        elif isinstance(existing, dict) or (existing is not None and isinstance(value, Mapping)):
            raise ConfigLoadError(
                f"Configuration layer '{source}' conflicts with the shape of key '{key}'",
                source=source,
            )
        else:
            merged[key] = value
    return merged


def load_json_layer(settings_file: str | os.PathLike[str]) -> dict[str, Any]:
    """Load the mandatory JSON settings file. Raises ConfigLoadError if missing or malformed."""
    path = Path(settings_file)
    source = str(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Settings file not found: {path}", source=source, cause=e) from e
    except OSError as e:
        raise ConfigLoadError(f"Settings file could not be read: {path}", source=source, cause=e) from e
    except UnicodeDecodeError as e:
        raise ConfigLoadError(f"Settings file is not valid UTF-8: {path}", source=source, cause=e) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(
            f"Settings file is not valid JSON: {path} (line {e.lineno}, column {e.colno})",
            source=source,
            cause=e,
        ) from e

    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Settings file must contain a JSON object at the top level: {path}",
            source=source,
        )
    return _lower_keys(data)


def environment_layer(environ: Mapping[str, str], prefix: str = "") -> dict[str, Any]:
    """
    Build the override layer from environment variables.

    Only hierarchical names (containing "__" or ":") are used; with a prefix, only
    names starting with it (case-insensitive), and the prefix is stripped first.
    """
    layer: dict[str, Any] = {}
    prefix_lower = prefix.lower()
    for name, value in sorted(environ.items()):
        key = name.lower()
        if prefix_lower:
            if not key.startswith(prefix_lower):
                continue
            key = key[len(prefix_lower):]
        for separator in ENV_KEY_SEPARATORS:
            key = key.replace(separator, "\0")
        segments = key.split("\0")
        if len(segments) < 2 or not all(segments):
            continue
        overlay: dict[str, Any] = {segments[-1]: value}
        for segment in reversed(segments[:-1]):
            overlay = {segment: overlay}
        layer = merge_layers(layer, overlay, source="environment")
    return layer


def development_telemetry_layer() -> dict[str, Any]:
    """Overrides applied only in development: push telemetry through in developer mode."""
    return {"applicationinsights": {"developermode": True}}


def resolve_settings(
    settings_file: str | os.PathLike[str],
    *,
    environment: str,
    environ: Mapping[str, str] | None = None,
    env_prefix: str = "",
) -> Settings:
    """
    Resolve the immutable Settings from the layered sources.

    Order (later overrides earlier): JSON file (mandatory), environment variables,
    development telemetry overrides (dev only). Any malformed layer raises
    ConfigLoadError; nothing falls back to defaults on error.
    """
    if environ is None:
        environ = os.environ

    merged = load_json_layer(settings_file)
    merged = merge_layers(merged, environment_layer(environ, env_prefix), source="environment")
    if environment == DEVELOPMENT_ENV:
        merged = merge_layers(merged, development_telemetry_layer(), source="development")
    merged["environment"] = environment

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ConfigLoadError(
            f"Settings are invalid ({e.error_count()} error(s)); {location}: {first['msg']}",
            source="validation",
            cause=e,
        ) from e

    logger.info(
        "Settings resolved",
        extra={
            "settings_file": str(settings_file),
            "environment": environment,
            "enable_https_redirect": settings.app_settings.enable_https_redirect,
            "telemetry_developer_mode": settings.application_insights.developer_mode,
        },
    )
    return settings

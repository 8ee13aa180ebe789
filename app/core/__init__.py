"""Core app configuration, logging and runtime probes."""

from app.core.config import (
    ConfigLoadError,
    HostSettings,
    Settings,
    get_host_settings,
    resolve_settings,
)
from app.core.debugger import is_debugger_attached
from app.core.logging import configure_logging

__all__ = [
    "ConfigLoadError",
    "HostSettings",
    "Settings",
    "configure_logging",
    "get_host_settings",
    "is_debugger_attached",
    "resolve_settings",
]

"""Settings models and loading."""

from kagiyama.config.loader import deep_merge, load_config, settings_from_mapping
from kagiyama.config.models import AppSettings, LoggingSettings, ServerSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ServerSettings",
    "deep_merge",
    "load_config",
    "settings_from_mapping",
]

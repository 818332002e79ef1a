"""Configuration loading and validation."""

from .models import (
    # Enums
    ListingStyle,
    # Config models
    AppConfig,
    DateHints,
    FetchConfig,
    LoggingConfig,
    SourceConfig,
)
from .loader import (
    ConfigError,
    load_all_source_configs,
    load_app_config,
    load_source_config,
    source_config_files,
    validate_source_config_file,
)
from .registry import SourceRegistry, UnknownSourceError

__all__ = [
    # Enums
    "ListingStyle",
    # Config models
    "AppConfig",
    "DateHints",
    "FetchConfig",
    "LoggingConfig",
    "SourceConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
    "load_source_config",
    "load_all_source_configs",
    "source_config_files",
    "validate_source_config_file",
    # Registry
    "SourceRegistry",
    "UnknownSourceError",
]

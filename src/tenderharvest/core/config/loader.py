"""
YAML configuration loading.

``configs/app.yaml`` holds application settings; ``configs/sources/``
holds one descriptor per municipality. String values may reference the
environment as ``${VAR}`` or ``${VAR:-default}``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .models import AppConfig, SourceConfig


DEFAULT_APP_CONFIG = Path("configs/app.yaml")
DEFAULT_SOURCES_DIR = Path("configs/sources")

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigError(Exception):
    """A configuration file could not be read or failed validation."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


# =============================================================================
# Helpers
# =============================================================================


def expand_env_vars(value: Any) -> Any:
    """Substitute ``${VAR}`` / ``${VAR:-default}`` in every nested string."""
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def format_validation_errors(error: ValidationError) -> list[str]:
    """One ``field.path: message`` line per pydantic error."""
    return [
        f"{'.'.join(str(part) for part in item['loc']) or '<root>'}: {item['msg']}"
        for item in error.errors()
    ]


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}", path=path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}", path=path)
    return data


def _load_model(path: Path, model: type[ModelT], kind: str, expand_env: bool) -> ModelT:
    data = _read_mapping(path)
    if expand_env:
        data = expand_env_vars(data)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid {kind} configuration in {path}",
            path=path,
            details="\n".join(format_validation_errors(e)),
        ) from e


# =============================================================================
# Public API
# =============================================================================


def load_app_config(path: Path | str | None = None, expand_env: bool = True) -> AppConfig:
    """Load ``app.yaml``; a missing file yields the defaults.

    Raises:
        ConfigError: If the file exists but is unreadable or invalid
    """
    path = DEFAULT_APP_CONFIG if path is None else Path(path)
    if not path.exists():
        return AppConfig()
    return _load_model(path, AppConfig, "app", expand_env)


def load_source_config(path: Path | str, expand_env: bool = True) -> SourceConfig:
    """Load one source descriptor.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    return _load_model(Path(path), SourceConfig, "source", expand_env)


def source_config_files(sources_dir: Path | str) -> list[Path]:
    """YAML descriptors in a directory, by name, skipping ``_``-prefixed templates."""
    directory = Path(sources_dir)
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in [*directory.glob("*.yaml"), *directory.glob("*.yml")] if not p.name.startswith("_")),
        key=lambda p: p.name,
    )


def load_all_source_configs(
    sources_dir: Path | str | None = None,
    expand_env: bool = True,
) -> list[SourceConfig]:
    """Load every descriptor in ``sources_dir`` in file-name order.

    Raises:
        ConfigError: If any descriptor is invalid or two files share an id
    """
    sources_dir = DEFAULT_SOURCES_DIR if sources_dir is None else Path(sources_dir)

    configs: list[SourceConfig] = []
    seen: dict[str, Path] = {}
    for config_file in source_config_files(sources_dir):
        config = load_source_config(config_file, expand_env=expand_env)
        if config.id in seen:
            raise ConfigError(
                f"Duplicate source id '{config.id}'",
                path=config_file,
                details=f"already defined in {seen[config.id]}",
            )
        seen[config.id] = config_file
        configs.append(config)

    return configs


def validate_source_config_file(path: Path | str) -> list[str]:
    """Check a descriptor without raising; returns error lines, empty if valid."""
    path = Path(path)
    try:
        data = _read_mapping(path)
    except ConfigError as e:
        return [str(e)]

    try:
        SourceConfig.model_validate(expand_env_vars(data))
    except ValidationError as e:
        return format_validation_errors(e)
    return []

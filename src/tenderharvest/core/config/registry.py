"""
Source registry.

Maps source ids to their adapter configuration. The map is built once,
from explicit configuration, and only ever read afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from .loader import load_all_source_configs
from .models import SourceConfig


class UnknownSourceError(KeyError):
    """Requested source id is not registered."""

    def __init__(self, source_id: str, available: Iterable[str] = ()):
        self.source_id = source_id
        self.available = sorted(available)
        super().__init__(source_id)

    def __str__(self) -> str:
        return f"Unknown source: {self.source_id}"


class SourceRegistry(Mapping[str, SourceConfig]):
    """Read-only mapping of source id to SourceConfig."""

    def __init__(self, configs: Iterable[SourceConfig]) -> None:
        entries: dict[str, SourceConfig] = {}
        for config in configs:
            if config.id in entries:
                raise ValueError(f"Duplicate source id: {config.id}")
            entries[config.id] = config
        self._entries = MappingProxyType(entries)

    @classmethod
    def from_directory(cls, sources_dir: Path | str | None = None) -> "SourceRegistry":
        """Build the registry from a directory of YAML files."""
        return cls(load_all_source_configs(sources_dir))

    def __getitem__(self, source_id: str) -> SourceConfig:
        try:
            return self._entries[source_id]
        except KeyError:
            raise UnknownSourceError(source_id, self._entries.keys()) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_source(self, source_id: str) -> SourceConfig:
        """Resolve a source id, raising UnknownSourceError if absent."""
        return self[source_id]

    def enabled(self) -> list[SourceConfig]:
        """List enabled sources in registration order."""
        return [config for config in self._entries.values() if config.enabled]

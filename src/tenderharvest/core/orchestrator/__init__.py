"""Orchestrator - per-source runs, batch runs and record assembly."""

from .assembler import SourceIntegrityError, assemble, verify_source
from .runner import (
    RunStats,
    SourceResult,
    SourceRunner,
    run_configured_sources,
    run_sources,
)

__all__ = [
    "SourceIntegrityError",
    "assemble",
    "verify_source",
    "RunStats",
    "SourceResult",
    "SourceRunner",
    "run_configured_sources",
    "run_sources",
]

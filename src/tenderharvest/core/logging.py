"""
Logging for TenderHarvest.

Every logger lives under the ``tenderharvest`` namespace. Terminal output
goes through rich; file output is JSON lines (orjson) so runs can be
grepped per source or per document afterwards.

Context travels on records as ``extra`` keys: ``source``, ``run_id``,
``url`` and ``document``.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson
from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console


ROOT_LOGGER = "tenderharvest"
CONTEXT_KEYS = ("source", "run_id", "url", "document")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "default",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in CONTEXT_KEYS if getattr(record, key, None)}


# =============================================================================
# Formatters and Handlers
# =============================================================================


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context keys flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_record_context(record),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode("utf-8")


class RichConsoleHandler(logging.Handler):
    """Print records to a rich console as ``[source] message``."""

    def __init__(self, console: "Console | None" = None, level: int = logging.NOTSET):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            style = LEVEL_STYLES.get(record.levelno, "default")
            line = f"[{style}]{escape(self.format(record))}[/{style}]"

            source = getattr(record, "source", None)
            if source:
                line = f"[cyan]{escape(f'[{source}]')}[/cyan] {line}"

            self.console.print(line, markup=True, highlight=False)
            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


# =============================================================================
# Setup
# =============================================================================


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the ``tenderharvest`` logger.

    Calling this again replaces the previous handlers.

    Args:
        level: Console log level name
        log_file: Optional file that receives every record at DEBUG
        json_format: Write the file as JSON lines instead of plain text
        rich_console: Use rich for the terminal, plain stderr otherwise

    Returns:
        The configured package logger
    """
    console_level = logging.getLevelName(level.upper())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = False

    console: logging.Handler
    if rich_console:
        console = RichConsoleHandler()
        console.setFormatter(logging.Formatter("%(message)s"))
    else:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT))
    console.setLevel(console_level)
    logger.addHandler(console)

    logger.setLevel(console_level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)
        )
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``tenderharvest`` or ``tenderharvest.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


# =============================================================================
# Context
# =============================================================================


class ContextualLogger(logging.LoggerAdapter):
    """Adapter that stamps bound context onto every record.

    Context passed through ``extra`` at the call site wins over bound
    context for that one call.
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, {k: v for k, v in context.items() if v is not None})

    @property
    def source(self) -> str | None:
        return self.extra.get("source")

    @property
    def run_id(self) -> str | None:
        return self.extra.get("run_id")

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextualLogger":
        """New adapter with extra context layered over this one."""
        return ContextualLogger(self.logger, **{**self.extra, **context})


def get_contextual_logger(name: str | None = None, **context: Any) -> ContextualLogger:
    """Logger carrying context such as ``source=`` and ``run_id=``."""
    return ContextualLogger(get_logger(name), **context)

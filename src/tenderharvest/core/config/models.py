"""
Pydantic configuration models for TenderHarvest.

These models provide type-safe configuration with validation for:
- Application settings
- Source adapter descriptors
- Fetch defaults
- Logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from lxml.cssselect import CSSSelector, SelectorError
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator


# =============================================================================
# Enums
# =============================================================================


class ListingStyle(str, Enum):
    """How a source lays out its listing page."""

    LINKS = "links"
    TABLE = "table"
    DOCUMENTS = "documents"


# =============================================================================
# Source Adapter Configuration
# =============================================================================


DEFAULT_LINK_SELECTOR = "a[href]"
DEFAULT_CONTEXT_SELECTOR = "li, tr, article, section, .document__item, .docman_document, p"


class DateHints(BaseModel):
    """Date interpretation hints for a source."""

    model_config = ConfigDict(frozen=True)

    day_first: bool = Field(
        default=True,
        description="Interpret ambiguous numeric dates as day-first",
    )


class SourceConfig(BaseModel):
    """Declarative descriptor for one tender source site.

    An adapter is pure data: it names the site, where its listings live,
    how to find candidate links on them and which static facts (organ of
    state, province, place) every record from this source carries.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9_]+$",
        description="Unique source identifier",
    )
    name: str | None = Field(
        default=None,
        description="Full name of the issuing body",
    )
    short_name: str = Field(
        ...,
        min_length=1,
        description="Display name written to the Source column",
    )

    # Static facts
    organ_of_state: str = Field(
        ...,
        min_length=1,
        description="Organ of state issuing the tenders",
    )
    province: str = Field(
        default="",
        description="Province the source belongs to",
    )
    place: str | None = Field(
        default=None,
        description="Place where goods/works/services are required (defaults to short name)",
    )
    category: str = Field(
        default="Municipal",
        description="Category column value",
    )
    tender_type: str = Field(
        default="Request for Bid",
        description="Tender Type column value",
    )

    # Entry points
    base_url: HttpUrl = Field(
        ...,
        description="Site base URL used to resolve relative links",
    )
    listing_urls: list[str] = Field(
        ...,
        min_length=1,
        description="Listing pages scanned for tenders",
    )
    force_source_url: str | None = Field(
        default=None,
        description="Source URL written for every record instead of the link",
    )

    # Discovery
    listing_style: ListingStyle = Field(
        default=ListingStyle.LINKS,
        description="Listing layout archetype",
    )
    link_selector: str = Field(
        default=DEFAULT_LINK_SELECTOR,
        description="CSS selector for candidate elements",
    )
    context_selector: str = Field(
        default=DEFAULT_CONTEXT_SELECTOR,
        description="CSS selector for the block giving a candidate its context",
    )
    skip_href_keywords: list[str] = Field(
        default_factory=list,
        description="Case-insensitive href fragments that are never tenders",
    )
    date_hints: DateHints = Field(default_factory=DateHints)

    # Fetching
    insecure_tls: bool = Field(
        default=False,
        description="Skip TLS certificate verification for this source",
    )
    timeout_seconds: float = Field(
        default=25.0,
        ge=1.0,
        le=60.0,
        description="Request timeout in seconds",
    )

    # Documents
    html_only: bool = Field(
        default=True,
        description="Skip fetching and parsing linked documents",
    )
    document_concurrency: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Documents fetched per batch",
    )

    # Output
    default_limit: int = Field(
        default=500,
        ge=1,
        description="Maximum records emitted per run",
    )
    csv_filename: str | None = Field(
        default=None,
        description="Output file name (defaults to <id>_tenders.csv)",
    )

    # Metadata
    enabled: bool = Field(
        default=True,
        description="Whether this source is active",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Tags for organizing/filtering sources",
    )
    notes: str | None = Field(
        default=None,
        description="Operator notes about this source",
    )

    @field_validator("listing_urls")
    @classmethod
    def listing_urls_are_absolute(cls, v: list[str]) -> list[str]:
        """Listing URLs must be absolute http(s) URLs."""
        for url in v:
            if not url.lower().startswith(("http://", "https://")):
                raise ValueError(f"listing URL must be absolute: {url}")
        return v

    @field_validator("link_selector", "context_selector")
    @classmethod
    def selector_compiles(cls, v: str) -> str:
        try:
            CSSSelector(v)
        except SelectorError as e:
            raise ValueError(f"invalid CSS selector {v!r}: {e}") from e
        return v

    @field_validator("skip_href_keywords")
    @classmethod
    def lowercase_keywords(cls, v: list[str]) -> list[str]:
        return [keyword.lower() for keyword in v if keyword]

    @model_validator(mode="after")
    def force_source_url_is_absolute(self) -> "SourceConfig":
        if self.force_source_url and not self.force_source_url.lower().startswith(("http://", "https://")):
            raise ValueError("force_source_url must be absolute")
        return self

    @property
    def effective_name(self) -> str:
        """Get full name, falling back to organ of state."""
        return self.name or self.organ_of_state

    @property
    def effective_place(self) -> str:
        """Get place, falling back to short name."""
        return self.place or self.short_name

    @property
    def effective_csv_filename(self) -> str:
        return self.csv_filename or f"{self.id}_tenders.csv"

    @property
    def base_url_str(self) -> str:
        """Base URL without trailing slash."""
        return str(self.base_url).rstrip("/")


# =============================================================================
# Fetch Defaults
# =============================================================================


class FetchConfig(BaseModel):
    """Global fetch settings."""

    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        description="User-Agent header sent with every request",
    )
    document_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=60.0,
        description="Timeout for document downloads",
    )
    max_concurrent_sources: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Sources scraped concurrently in a batch run",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/tenderharvest.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    sources_dir: Path = Field(
        default=Path("configs/sources"),
        description="Directory holding one YAML file per source",
    )
    output_dir: Path = Field(
        default=Path("output"),
        description="Directory CSV files are written to",
    )
    merged_filename: str = Field(
        default="all_municipal_tenders.csv",
        description="File name for the merged CSV",
    )

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

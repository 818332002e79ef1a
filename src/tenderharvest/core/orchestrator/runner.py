"""
Source runner orchestrator.

Coordinates the workflow for one source: fetch listings → classify →
enrich from documents → assemble. ``run_sources`` runs many sources
concurrently and rejects the whole batch on an integrity violation.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..backends.base import Backend, FetchError, RequestSpec
from ..backends.http_backend import HttpBackend
from ..config.models import AppConfig, FetchConfig, SourceConfig
from ..extract.base import ListingRow
from ..extract.classifier import CandidateClassifier
from ..extract.documents import DocumentTextExtractor, merge_enrichment
from ..logging import get_contextual_logger, get_logger
from ..normalize.canonical import TenderRecord
from ..normalize.dedupe import deduplicate
from .assembler import SourceIntegrityError, assemble


logger = get_logger("runner")


@dataclass
class RunStats:
    """Statistics for one source run."""

    source_id: str
    pages_fetched: int = 0
    pages_failed: int = 0
    candidates_accepted: int = 0
    documents_fetched: int = 0
    documents_failed: int = 0
    documents_enriched: int = 0
    records_emitted: int = 0

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        """Get run duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_id": self.source_id,
            "pages_fetched": self.pages_fetched,
            "pages_failed": self.pages_failed,
            "candidates_accepted": self.candidates_accepted,
            "documents_fetched": self.documents_fetched,
            "documents_failed": self.documents_failed,
            "documents_enriched": self.documents_enriched,
            "records_emitted": self.records_emitted,
            "errors_count": len(self.errors),
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class SourceResult:
    """Records and statistics produced for one source."""

    config: SourceConfig
    records: list[TenderRecord]
    stats: RunStats

    @property
    def ok(self) -> bool:
        return not self.stats.errors or bool(self.records)


class SourceRunner:
    """Runs the extraction pipeline for a single source.

    Listing URLs are processed in order. Document enrichment runs in
    fixed-size batches; each batch finishes before the next starts.
    """

    def __init__(
        self,
        config: SourceConfig,
        backend: Backend,
        *,
        extractor: DocumentTextExtractor | None = None,
        html_only: bool | None = None,
        limit: int | None = None,
        document_timeout: float = 30.0,
        run_id: str | None = None,
    ) -> None:
        """Initialize the source runner.

        Args:
            config: Source adapter
            backend: Fetch backend (not closed by the runner)
            extractor: Document text extractor (created if not provided)
            html_only: Override the source's html_only flag
            limit: Maximum records (defaults to config.default_limit)
            document_timeout: Timeout for document downloads
            run_id: Identifier attached to log records
        """
        self.config = config
        self.backend = backend
        self.extractor = extractor or DocumentTextExtractor()
        self.html_only = config.html_only if html_only is None else html_only
        self.limit = limit
        self.document_timeout = document_timeout
        self.run_id = run_id or uuid.uuid4().hex[:12]

        self.classifier = CandidateClassifier(config)
        self.log = get_contextual_logger("runner", source=config.id, run_id=self.run_id)

    async def run(self) -> SourceResult:
        """Execute a complete source run.

        Returns:
            SourceResult with records and statistics

        Raises:
            SourceIntegrityError: If assembled records name another source
        """
        stats = RunStats(source_id=self.config.id)

        rows: list[ListingRow] = []
        for url in self.config.listing_urls:
            rows.extend(await self._scan_listing(url, stats))

        stats.candidates_accepted = len(rows)

        # The limit applies before any document is downloaded
        max_records = self.config.default_limit if self.limit is None else self.limit
        rows = deduplicate(rows)[:max(max_records, 0)]

        if not self.html_only and rows:
            rows = await self._enrich_all(rows, stats)

        records = assemble(rows, self.config, self.limit)

        stats.records_emitted = len(records)
        stats.finished_at = datetime.now(timezone.utc)

        self.log.info(
            f"{len(records)} records from {stats.pages_fetched} page(s), "
            f"{stats.pages_failed} failed"
        )
        return SourceResult(config=self.config, records=records, stats=stats)

    async def _scan_listing(self, url: str, stats: RunStats) -> list[ListingRow]:
        """Fetch and classify one listing URL; failures yield no rows."""
        request = RequestSpec(
            url=url,
            timeout=self.config.timeout_seconds,
            insecure_tls=self.config.insecure_tls,
            source_id=self.config.id,
            kind="listing",
        )

        try:
            result = await self.backend.fetch(request)
        except FetchError as e:
            stats.pages_failed += 1
            stats.errors.append(f"Failed URL: {url} -> {e}")
            self.log.bind(url=url).warning(f"Failed URL: {url} -> {e}")
            return []

        stats.pages_fetched += 1
        rows = self.classifier.scan(result.text, result.final_url)
        self.log.bind(url=url).debug(f"{len(rows)} candidate(s) on {url}")
        return rows

    async def _enrich_all(self, rows: list[ListingRow], stats: RunStats) -> list[ListingRow]:
        """Enrich rows that link a document, batch by batch."""
        batch_size = self.config.document_concurrency
        enriched: list[ListingRow] = []

        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            enriched.extend(
                await asyncio.gather(*(self._enrich_one(row, stats) for row in batch))
            )

        return enriched

    async def _enrich_one(self, row: ListingRow, stats: RunStats) -> ListingRow:
        if not row.has_document:
            return row

        request = RequestSpec(
            url=row.document_url,
            timeout=self.document_timeout,
            insecure_tls=self.config.insecure_tls,
            source_id=self.config.id,
            kind="document",
        )

        try:
            result = await self.backend.fetch(request)
        except FetchError as e:
            stats.documents_failed += 1
            self.log.bind(document=row.document_url).warning(
                f"Document fetch failed: {row.document_url} -> {e}"
            )
            return row

        stats.documents_fetched += 1
        enrichment = await asyncio.to_thread(
            self.extractor.enrich, result.content, result.content_type, result.final_url
        )
        if enrichment.is_empty:
            return row

        stats.documents_enriched += 1
        return merge_enrichment(row, enrichment)


async def run_sources(
    configs: Iterable[SourceConfig],
    *,
    backend: Backend | None = None,
    fetch_config: FetchConfig | None = None,
    html_only: bool | None = None,
    limit: int | None = None,
) -> list[SourceResult]:
    """Run several sources concurrently.

    Each source is an independent task; at most
    ``fetch_config.max_concurrent_sources`` run at once. A failure inside
    one source is logged and reported in its stats. An integrity violation
    cancels the remaining sources and is re-raised so nothing is emitted.

    Args:
        configs: Sources to run
        backend: Shared backend (an HttpBackend is created and closed if omitted)
        fetch_config: Fetch defaults
        html_only: Force html_only for every source
        limit: Per-source record limit

    Returns:
        Results in the order the sources were given

    Raises:
        SourceIntegrityError: If any source produced misattributed records
    """
    configs = list(configs)
    fetch_config = fetch_config or FetchConfig()
    owns_backend = backend is None
    if backend is None:
        backend = HttpBackend(user_agent=fetch_config.user_agent)

    run_id = uuid.uuid4().hex[:12]
    semaphore = asyncio.Semaphore(fetch_config.max_concurrent_sources)
    extractor = DocumentTextExtractor()

    async def run_one(config: SourceConfig) -> SourceResult:
        async with semaphore:
            runner = SourceRunner(
                config,
                backend,
                extractor=extractor,
                html_only=html_only,
                limit=limit,
                document_timeout=fetch_config.document_timeout_seconds,
                run_id=run_id,
            )
            try:
                return await runner.run()
            except SourceIntegrityError:
                raise
            except Exception as e:
                logger.exception(f"Source run failed for {config.id}")
                stats = RunStats(source_id=config.id, errors=[str(e)])
                stats.finished_at = datetime.now(timezone.utc)
                return SourceResult(config=config, records=[], stats=stats)

    tasks = [asyncio.create_task(run_one(config)) for config in configs]
    try:
        results = await asyncio.gather(*tasks)
    except SourceIntegrityError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    finally:
        if owns_backend:
            await backend.close()

    return list(results)


def run_configured_sources(
    configs: Iterable[SourceConfig],
    app_config: AppConfig,
    *,
    html_only: bool | None = None,
    limit: int | None = None,
) -> list[SourceResult]:
    """Synchronous entry point used by the CLI."""
    return asyncio.run(
        run_sources(
            configs,
            fetch_config=app_config.fetch,
            html_only=html_only,
            limit=limit,
        )
    )

"""
Record assembly and source integrity checks.

Turns the listing rows collected for one source into final records and
refuses to emit anything if a record claims the wrong source.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..config.models import SourceConfig
from ..extract.base import ListingRow
from ..normalize.canonical import TenderRecord, build_record
from ..normalize.dedupe import deduplicate


class SourceIntegrityError(RuntimeError):
    """A record's source does not match the adapter that produced it.

    Signals a misrouted or misconfigured adapter. Fatal for the whole run.
    """

    def __init__(self, source_id: str, expected: str, found: list[str]):
        self.source_id = source_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Source integrity violation for '{source_id}': expected source "
            f"'{expected}', found {', '.join(repr(name) for name in found)}"
        )


def verify_source(records: Iterable[TenderRecord], config: SourceConfig) -> None:
    """Raise SourceIntegrityError unless every record names this source."""
    mismatched = sorted({r.source for r in records if r.source != config.short_name})
    if mismatched:
        raise SourceIntegrityError(config.id, config.short_name, mismatched)


def assemble(
    rows: Iterable[ListingRow],
    config: SourceConfig,
    limit: int | None = None,
) -> list[TenderRecord]:
    """Deduplicate, truncate and build records for one source.

    Deterministic: the same rows always give the same records in the same
    order.

    Args:
        rows: Listing rows in scan order (already enriched)
        config: Source the rows came from
        limit: Maximum records (defaults to config.default_limit)

    Returns:
        Records in scan order

    Raises:
        SourceIntegrityError: If any record names a different source
    """
    max_records = config.default_limit if limit is None else limit

    unique = deduplicate(rows)[:max(max_records, 0)]
    records = [build_record(row, config) for row in unique]

    verify_source(records, config)
    return records

"""
CSV output for tender records.

Writes one file per source in the fixed column layout and merges the
per-source files into a single combined CSV.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..core.normalize.canonical import CSV_COLUMNS, TenderRecord


logger = logging.getLogger(__name__)


class CsvSink:
    """Writes records to CSV files under an output directory."""

    def __init__(self, output_dir: Path | str = Path("output")) -> None:
        self.output_dir = Path(output_dir)

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename

    def write(self, records: Iterable[TenderRecord], path: Path | str) -> int:
        """Write records with a header row, replacing any existing file.

        Args:
            records: Records to write
            path: Target file; relative paths resolve under output_dir

        Returns:
            Number of data rows written
        """
        target = Path(path)
        if not target.is_absolute():
            target = self.output_dir / target
        target.parent.mkdir(parents=True, exist_ok=True)

        count = 0
        with open(target, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(CSV_COLUMNS))
            writer.writeheader()
            for record in records:
                writer.writerow(record.to_row())
                count += 1

        logger.info("Wrote %d rows to %s", count, target.name)
        return count


@dataclass
class MergeReport:
    """Outcome of merging per-source CSV files."""

    output: Path
    rows: int = 0
    merged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def merge_csv_files(paths: Iterable[Path | str], out: Path | str) -> MergeReport:
    """Concatenate per-source CSVs into one file, in the given order.

    Missing or unreadable files are skipped. Columns are aligned to the
    canonical layout; absent columns are written empty.

    Args:
        paths: Per-source CSV files
        out: Combined CSV path

    Returns:
        MergeReport listing merged and skipped files
    """
    out = Path(out)
    report = MergeReport(output=out)
    rows: list[dict[str, str]] = []

    for path in (Path(p) for p in paths):
        if not path.exists():
            logger.warning("Skipping (not found): %s", path.name)
            report.skipped.append(path.name)
            continue

        try:
            with open(path, newline="", encoding="utf-8") as f:
                file_rows = [
                    {column: (row.get(column) or "") for column in CSV_COLUMNS}
                    for row in csv.DictReader(f)
                ]
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.warning("Skipping %s: %s", path.name, e)
            report.skipped.append(path.name)
            continue

        rows.extend(file_rows)
        report.merged.append(path.name)
        logger.info("%s: %d rows", path.name, len(file_rows))

    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(CSV_COLUMNS))
        writer.writeheader()
        writer.writerows(rows)

    report.rows = len(rows)
    return report

"""Output sinks for assembled tender records."""

from .csv_sink import CsvSink, MergeReport, merge_csv_files

__all__ = [
    "CsvSink",
    "MergeReport",
    "merge_csv_files",
]

"""Output formatting for the ntfsmft CLI.

Implements JSON, JSONL and CSV output. The output target only ever holds
machine-readable results; progress, logs and metrics go to stderr.
"""

import csv
import json
import sys
from datetime import datetime
from typing import IO, Any
from uuid import UUID

from pydantic import BaseModel

from ntfsmft.core.config import OutputFormat
from ntfsmft.models.record import FlatMftEntry


class JSONEncoder(json.JSONEncoder):
    """JSON encoder for ntfsmft types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj).upper()
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, bytes):
            return obj.hex()
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def output_json(data: Any, file: IO[str] | None = None, indent: int | None = 2) -> None:
    """Write one JSON document.

    Args:
        data: Data to output (dict, list, or Pydantic model)
        file: Output file (defaults to stdout)
        indent: Indentation, None for a single line
    """
    if file is None:
        file = sys.stdout

    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", exclude_none=True)

    json.dump(data, file, cls=JSONEncoder, ensure_ascii=False, indent=indent)
    file.write("\n")
    file.flush()


def output_error(error: Any, file: IO[str] | None = None) -> None:
    """Write a structured error to stdout.

    Errors go to stdout (not stderr) for programmatic handling.
    """
    output_json(error, file=file)


class OutputFormatter:
    """Writes dumped entries to a target in the configured format."""

    def __init__(self, format: OutputFormat = "jsonl", file: IO[str] | None = None):
        """Initialize formatter.

        Args:
            format: Output format (json, jsonl, csv)
            file: Output target (defaults to stdout)
        """
        self.format = format
        self.file = file if file is not None else sys.stdout
        self.records_written = 0
        self._csv_writer: csv.DictWriter | None = None

    @property
    def needs_flat_rows(self) -> bool:
        return self.format == "csv"

    def output(self, record: dict[str, Any] | FlatMftEntry) -> None:
        """Write one entry.

        Args:
            record: Nested entry document for JSON formats, flat row for CSV
        """
        if self.format == "csv":
            self._write_csv_row(record)
        else:
            output_json(record, file=self.file, indent=2 if self.format == "json" else None)
        self.records_written += 1

    def _write_csv_row(self, record: dict[str, Any] | FlatMftEntry) -> None:
        if isinstance(record, FlatMftEntry):
            row = record.model_dump(mode="json", by_alias=True)
        else:
            row = record

        if self._csv_writer is None:
            self._csv_writer = csv.DictWriter(
                self.file, fieldnames=FlatMftEntry.csv_columns(), lineterminator="\n"
            )
            self._csv_writer.writeheader()

        self._csv_writer.writerow({key: _csv_value(value) for key, value in row.items()})
        self.file.flush()


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value

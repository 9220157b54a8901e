"""Tabular CSV export of dataset rows."""

import csv
import io
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from ..config.defaults import ExportParams
from ..errors import ExportError
from .columns import ColumnSpec, Row

logger = structlog.get_logger(__name__)

_UNSAFE_FILENAME_CHARS = ("/", "\\", "\0")


def format_cell(row: Row, column: ColumnSpec) -> Any:
    """Formatted value if present, raw value if no formatter, else empty."""
    value = row.get(column.key)
    if value is None:
        return ""
    if column.formatter is not None:
        return column.formatter(value)
    return value


def serialize_rows(
    rows: Sequence[Row],
    columns: Sequence[ColumnSpec],
    delimiter: str = ","
) -> str:
    """
    Serialize rows to delimited text.

    The first line holds the column labels; each following line holds one row
    in input order. Fields containing the delimiter, a quote character or a
    newline are quoted, with embedded quotes doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow([column.label for column in columns])
    for row in rows:
        writer.writerow([format_cell(row, column) for column in columns])
    return buffer.getvalue()


def safe_filename(filename: str) -> str:
    for char in _UNSAFE_FILENAME_CHARS:
        filename = filename.replace(char, "-")
    return filename


class TabularExporter:
    """Writes serialized tables as downloadable CSV files."""

    def __init__(self, download_dir: Path, delimiter: str = ",", encoding: str = "utf-8"):
        self.download_dir = Path(download_dir)
        self.delimiter = delimiter
        self.encoding = encoding

    @classmethod
    def from_config(cls, params: ExportParams,
                    download_dir: Optional[Path] = None) -> "TabularExporter":
        return cls(
            download_dir=Path(download_dir) if download_dir is not None else Path(params.download_dir),
            delimiter=params.delimiter,
            encoding=params.encoding,
        )

    def export(
        self,
        title: str,
        rows: Sequence[Row],
        columns: Sequence[ColumnSpec],
        filename: str
    ) -> Path:
        """
        Serialize rows and save them as {filename}.csv in the download directory.

        Raises:
            ExportError: If the file cannot be written
        """
        content = serialize_rows(rows, columns, self.delimiter)
        target = self.download_dir / f"{safe_filename(filename)}.csv"

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding=self.encoding, newline="") as f:
                f.write(content)
        except OSError as e:
            logger.error(
                "CSV export failed",
                title=title,
                output_path=str(target),
                error=str(e)
            )
            raise ExportError(
                f"Could not write {target}: {e}",
                filename=filename,
                target=str(target)
            ) from e

        logger.info(
            "CSV exported",
            title=title,
            output_path=str(target),
            rows=len(rows),
            columns=len(columns)
        )
        return target

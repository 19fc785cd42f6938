"""Delimited text reader."""

import csv
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import IO

from .config import CsvReaderConfig
from .errors import CsvError, IoError
from .reader import FileReader, Value
from .utils import coerce_field

logger = logging.getLogger(__name__)

# bytes that are not valid UTF-8 decode to these under "surrogateescape"
_UNDECODABLE_RE = re.compile("[\udc80-\udcff]")


def _replace_undecodable(text: str) -> str:
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


@dataclass
class _CsvCursor:
    file: IO[str]
    rows: Iterator[list[str]]
    header: list[str] | None = None

    @property
    def line(self) -> int:
        return self.rows.line_num  # type: ignore[attr-defined]


class CsvReader(FileReader):
    """
    Reads a delimited text file into one object per row.

    The first row is the header and names the fields of every following row.
    Field values are converted with ``coerce_field``: numbers, ``true`` and
    ``false`` become JSON numbers and booleans; everything else stays a string.

    Rows whose field count differs from the header raise a recoverable
    ``CsvError`` unless ``flexible`` is set, in which case missing fields are
    left out of the record and extra fields are dropped.

    A row that is not valid UTF-8 raises a recoverable ``CsvError`` for that
    row only; the rows around it are still read.

    Not thread safe: a CsvReader is meant to be consumed by a single caller.
    """

    type = "csv"
    config_class = CsvReaderConfig

    config: CsvReaderConfig

    def _open(self) -> _CsvCursor:
        try:
            f = open(
                self.config.file_path, encoding="utf-8-sig", errors="surrogateescape", newline=""
            )
        except OSError as e:
            raise IoError.wrap(e, fatal=True) from e

        rows = csv.reader(f, delimiter=self.config.delimiter_char)
        return _CsvCursor(file=f, rows=rows)

    def _next_record(self, cursor: _CsvCursor) -> Value:
        while True:
            try:
                row = next(cursor.rows)
            except csv.Error as e:
                raise CsvError(f"line {cursor.line}: {e}", cause=e, line=cursor.line) from e
            except OSError as e:
                raise IoError.wrap(e) from e

            if not row:
                continue

            if any(_UNDECODABLE_RE.search(field) for field in row):
                if cursor.header is None:
                    cursor.header = [_replace_undecodable(field) for field in row]
                raise CsvError(f"line {cursor.line}: invalid UTF-8 in record", line=cursor.line)

            if cursor.header is None:
                cursor.header = row
                continue

            return self._build_record(cursor.header, row, cursor.line)

    def _build_record(self, header: list[str], row: list[str], line: int) -> Value:
        if len(row) != len(header):
            if not self.config.flexible:
                raise CsvError(
                    f"line {line}: found record with {len(row)} fields, "
                    f"but the header has {len(header)} fields",
                    line=line,
                )
            logger.debug(
                "Line %d has %d fields instead of %d, adjusting", line, len(row), len(header)
            )

        return {name: coerce_field(field) for name, field in zip(header, row)}

    def _close_handle(self, cursor: _CsvCursor) -> None:
        cursor.file.close()

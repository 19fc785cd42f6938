"""Record Stream - normalize flat files into a stream of JSON-like records.

This package provides lazily opened file readers that turn delimited text and
JSON streams into records, one per ``read_item`` call.

Architecture:
    A configuration carries a ``type`` tag that selects the reader.
    Readers open their file on first use and report failures only once.
"""

from .config import (
    CsvReaderConfig,
    JsonStreamReaderConfig,
    ReaderConfig,
    load_reader_config,
    parse_reader_config,
)
from .csv_reader import CsvReader
from .dispatch import READERS, build_reader
from .errors import (
    ConfigError,
    CsvError,
    InitializationError,
    IoError,
    JsonError,
    ReaderError,
)
from .jsonstream_reader import JsonStreamReader
from .reader import FileReader, ReaderState, Record, Value
from .utils import coerce_field, stream_records

__all__ = [
    "READERS",
    "ConfigError",
    "CsvError",
    "CsvReader",
    "CsvReaderConfig",
    "FileReader",
    "InitializationError",
    "IoError",
    "JsonError",
    "JsonStreamReader",
    "JsonStreamReaderConfig",
    "ReaderConfig",
    "ReaderError",
    "ReaderState",
    "Record",
    "Value",
    "build_reader",
    "coerce_field",
    "load_reader_config",
    "parse_reader_config",
    "stream_records",
]

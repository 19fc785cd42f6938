"""Build the reader selected by a configuration's ``type`` tag."""

from collections.abc import Mapping
from typing import Any

from .config import ReaderConfig, parse_reader_config
from .csv_reader import CsvReader
from .errors import ConfigError
from .jsonstream_reader import JsonStreamReader
from .reader import FileReader

READERS: dict[str, type[FileReader]] = {
    CsvReader.type: CsvReader,
    JsonStreamReader.type: JsonStreamReader,
}


def build_reader(config: ReaderConfig | Mapping[str, Any]) -> FileReader:
    """
    Create the reader for a configuration.

    Args:
        config: A ReaderConfig instance or a raw mapping carrying a ``type`` tag

    Returns:
        An unopened reader; the file is only opened by the first ``read_item`` call

    Raises:
        ConfigError: If the configuration is invalid or its type has no reader
    """
    if not isinstance(config, ReaderConfig):
        config = parse_reader_config(config)

    reader_cls = READERS.get(config.type)
    if reader_cls is None:
        raise ConfigError(f"No reader registered for type {config.type!r}")

    return reader_cls(config)

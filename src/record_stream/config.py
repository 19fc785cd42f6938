"""Reader configuration: one immutable variant per reader type, selected by the ``type`` tag."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, ClassVar

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReaderConfig:
    """Base class for reader configurations."""

    type: ClassVar[str]

    file_path: str

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        data.update({f.name: getattr(self, f.name) for f in fields(self)})
        return data


@dataclass(frozen=True)
class CsvReaderConfig(ReaderConfig):
    """Delimited text. Only the first character of ``delimiter`` is used."""

    type: ClassVar[str] = "csv"

    delimiter: str = ","
    flexible: bool = False

    @property
    def delimiter_char(self) -> str:
        return self.delimiter[0] if self.delimiter else ","


@dataclass(frozen=True)
class JsonStreamReaderConfig(ReaderConfig):
    """JSON values one after another, delimited by their own structure."""

    type: ClassVar[str] = "jsonstream"


CONFIG_TYPES: dict[str, type[ReaderConfig]] = {
    CsvReaderConfig.type: CsvReaderConfig,
    JsonStreamReaderConfig.type: JsonStreamReaderConfig,
}

_FIELD_TYPES: dict[str, type] = {
    "file_path": str,
    "delimiter": str,
    "flexible": bool,
}


def parse_reader_config(config_obj: Mapping[str, Any]) -> ReaderConfig:
    """
    Build the configuration variant selected by the ``type`` field.

    Args:
        config_obj: Mapping such as ``{"type": "csv", "file_path": "data.csv"}``

    Returns:
        The matching ReaderConfig subclass instance

    Raises:
        ConfigError: If the tag is unknown, a required field is missing or a
            field has the wrong type
    """
    if not isinstance(config_obj, Mapping):
        raise ConfigError(
            f"Reader configuration must be a mapping, got {type(config_obj).__name__}"
        )

    reader_type = config_obj.get("type")
    if reader_type is None:
        raise ConfigError("Reader configuration missing required 'type' field")

    config_cls = CONFIG_TYPES.get(reader_type)
    if config_cls is None:
        known = ", ".join(sorted(CONFIG_TYPES))
        raise ConfigError(f"Unknown reader type: {reader_type!r} (expected one of: {known})")

    names = {f.name for f in fields(config_cls)}
    kwargs: dict[str, Any] = {}
    for key, value in config_obj.items():
        if key == "type":
            continue
        if key not in names:
            logger.warning("Ignoring unknown field %r for reader type '%s'", key, reader_type)
            continue
        expected = _FIELD_TYPES[key]
        if not isinstance(value, expected):
            raise ConfigError(
                f"Field '{key}' of reader type '{reader_type}' must be "
                f"{expected.__name__}, got {type(value).__name__}"
            )
        kwargs[key] = value

    if "file_path" not in kwargs:
        raise ConfigError(f"Reader type '{reader_type}' missing required 'file_path' field")

    return config_cls(**kwargs)


def load_reader_config(
    config_str: str | None = None, config_file: str | None = None
) -> ReaderConfig:
    """Load a reader configuration from an inline YAML/JSON string or from a file."""
    if config_str and config_file:
        raise ValueError("Only one of --config or --configFile may be provided")

    if config_str:
        text = config_str
    elif config_file:
        try:
            with open(config_file) as f:
                text = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Config file not found: {config_file}") from None
    else:
        raise ValueError("Either --config or --configFile must be provided")

    try:
        config_obj = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid reader configuration: {e}") from e

    return parse_reader_config(config_obj)

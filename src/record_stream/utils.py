"""Utility functions for record-stream."""

import logging
import math
import re
from collections.abc import Iterator

from .errors import ReaderError
from .reader import FileReader, Value

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def coerce_field(text: str) -> Value:
    """Convert a raw delimited-text field to the JSON type it spells.

    Numbers first, then the exact literals ``true``/``false``, otherwise the
    text itself. The empty string stays an empty string.
    """
    if _INTEGER_RE.fullmatch(text):
        try:
            return int(text)
        except ValueError:
            # longer than sys.get_int_max_str_digits()
            return text
    if _FLOAT_RE.fullmatch(text):
        value = float(text)
        # 1e999 and friends are not representable JSON numbers
        if not math.isinf(value):
            return value
        return text
    if text == "true":
        return True
    if text == "false":
        return False
    return text


def stream_records(reader: FileReader) -> Iterator[Value]:
    """Drain a reader, logging malformed records as warnings.

    Fatal errors (the file cannot be opened, the reader is poisoned) are
    re-raised. Terminates when the reader is exhausted.
    """
    position = 0
    while True:
        position += 1
        try:
            record = reader.read_item()
        except StopIteration:
            return
        except ReaderError as e:
            if e.fatal:
                raise
            message = str(e)
            preview = message[:200] + "..." if len(message) > 200 else message
            logger.warning("Skipping malformed record %d: %s", position, preview)
            continue
        yield record

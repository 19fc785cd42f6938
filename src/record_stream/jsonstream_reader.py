"""JSON stream reader.

Reads JSON values written one after another (``{...}{...}`` or one per line,
pretty-printed or not). Value boundaries are found by the JSON structure
itself, never by splitting lines.
"""

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import IO

import ijson

from .config import JsonStreamReaderConfig
from .errors import InitializationError, IoError, JsonError, ReaderError
from .reader import FileReader, Value

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_WHITESPACE = b" \t\n\r"


def iter_json_values(f: IO[bytes], chunk_size: int = CHUNK_SIZE) -> Iterator[Value]:
    """Yield every top-level JSON value of a binary stream.

    Values completed before a syntax error are yielded before the error is
    raised. The parser cannot resynchronize after an error, so the iterator
    ends there.
    """
    values = ijson.sendable_list()
    coro = ijson.items_coro(values, "", multiple_values=True, use_float=True)
    has_content = False
    while True:
        chunk = f.read(chunk_size)
        if not chunk and not has_content:
            # empty or whitespace-only input holds no values, it is not truncated
            return
        has_content = has_content or bool(chunk.strip(_WHITESPACE))
        error: Exception | None = None
        try:
            if chunk:
                coro.send(chunk)
            else:
                coro.close()
        except (ijson.JSONError, ValueError) as e:
            error = e

        yield from values
        del values[:]

        if error is not None:
            raise error
        if not chunk:
            return


class PoisonableLock:
    """A mutex that becomes unusable if its holder fails unexpectedly.

    Reader errors and end-of-stream are normal outcomes of a read and leave
    the lock healthy. Any other exception escaping while the lock is held
    poisons it: every later acquisition raises a fatal InitializationError.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    @property
    def mutex(self) -> threading.Lock:
        """The underlying lock, acquired without the poison check."""
        return self._lock

    def __enter__(self) -> "PoisonableLock":
        self._lock.acquire()
        if self._poisoned:
            self._lock.release()
            raise InitializationError("Mutex lock poisoned")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None and not issubclass(exc_type, (ReaderError, StopIteration)):
                self._poisoned = True
                logger.error("Lock poisoned by %s: %s", exc_type.__name__, exc_val)
        finally:
            self._lock.release()


@dataclass
class _JsonCursor:
    file: IO[bytes]
    values: Iterator[Value]


class JsonStreamReader(FileReader):
    """
    Reads a stream of JSON values, one record per value, without any type conversion.

    One instance can be shared between threads: every ``read_item`` call,
    including the lazy opening of the file, runs under a single lock, so each
    record is handed to exactly one caller, in file order.
    """

    type = "jsonstream"
    config_class = JsonStreamReaderConfig

    config: JsonStreamReaderConfig

    def __init__(self, config: JsonStreamReaderConfig) -> None:
        super().__init__(config)
        self._lock = PoisonableLock()

    def read_item(self) -> Value:
        with self._lock:
            return super().read_item()

    def close(self) -> None:
        # releasing the file must still work once the lock is poisoned
        with self._lock.mutex:
            super().close()

    def _open(self) -> _JsonCursor:
        try:
            f = open(self.config.file_path, "rb")
        except OSError as e:
            raise IoError.wrap(e, fatal=True) from e

        return _JsonCursor(file=f, values=iter_json_values(f))

    def _next_record(self, cursor: _JsonCursor) -> Value:
        try:
            return next(cursor.values)
        except (ijson.JSONError, ValueError) as e:
            raise JsonError.wrap(e) from e
        except OSError as e:
            raise IoError.wrap(e) from e

    def _close_handle(self, cursor: _JsonCursor) -> None:
        cursor.file.close()

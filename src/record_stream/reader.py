"""Streaming file reader capability shared by every reader type."""

import enum
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Union

from .config import ReaderConfig
from .errors import ReaderError

logger = logging.getLogger(__name__)

Value = Union[None, bool, int, float, str, list["Value"], dict[str, "Value"]]
Record = Value


class ReaderState(enum.Enum):
    """Lifecycle of a reader. ACTIVE is the only state holding an open resource."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class FileReader(ABC):
    """
    Reads records from a file, one per ``read_item`` call.

    The file is opened lazily on the first call. Readers are iterators, so
    ``for record in reader`` works; since an error does not end a reader,
    iteration can be resumed after a recoverable ``ReaderError``.

    If the file cannot be opened, the error is raised once and the reader
    then behaves as exhausted forever: it never tries to open the file again.
    """

    type: ClassVar[str]
    config_class: ClassVar[type[ReaderConfig]]

    def __init__(self, config: ReaderConfig) -> None:
        if not isinstance(config, self.config_class):
            raise TypeError(
                f"{type(self).__name__} expects {self.config_class.__name__}, "
                f"got {type(config).__name__}"
            )
        self.config = config
        self._state = ReaderState.UNINITIALIZED
        self._handle: Any = None  # set only while ACTIVE

    @property
    def state(self) -> ReaderState:
        return self._state

    def read_item(self) -> Value:
        """
        Return the next record.

        Raises:
            StopIteration: When the stream is exhausted (or failed earlier)
            ReaderError: For a malformed record (``fatal`` is False, the next
                call continues with the following record) or when the file
                cannot be opened (``fatal`` is True, reported only once)
        """
        if self._state is ReaderState.UNINITIALIZED:
            self._activate()

        if self._state is not ReaderState.ACTIVE:
            raise StopIteration

        try:
            return self._next_record(self._handle)
        except StopIteration:
            self._release(ReaderState.EXHAUSTED)
            raise

    def _activate(self) -> None:
        try:
            handle = self._open()
        except ReaderError as e:
            self._state = ReaderState.FAILED
            logger.error(
                "%s initialization error : %r - Config : %r", type(self).__name__, e, self.config
            )
            raise
        self._handle = handle
        self._state = ReaderState.ACTIVE
        logger.debug("Initialized %s with config : %r", type(self).__name__, self.config)

    def _release(self, state: ReaderState) -> None:
        handle, self._handle = self._handle, None
        self._state = state
        if handle is not None:
            self._close_handle(handle)

    @abstractmethod
    def _open(self) -> Any:
        """Acquire the underlying resource. Must raise ReaderError on failure."""

    @abstractmethod
    def _next_record(self, handle: Any) -> Value:
        """Produce the next record from an open handle, or raise StopIteration."""

    @abstractmethod
    def _close_handle(self, handle: Any) -> None:
        """Release a handle returned by ``_open``."""

    def close(self) -> None:
        """Release the file early. Later calls to ``read_item`` report exhaustion."""
        if self._state in (ReaderState.UNINITIALIZED, ReaderState.ACTIVE):
            self._release(ReaderState.EXHAUSTED)

    def __iter__(self) -> "FileReader":
        return self

    def __next__(self) -> Value:
        return self.read_item()

    def __enter__(self) -> "FileReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r}, state={self._state.value})"

"""Error types raised by file readers."""


class ConfigError(ValueError):
    """Raised when a reader configuration is invalid (unknown type, missing fields)."""


class ReaderError(Exception):
    """Base class for every error surfaced by ``FileReader.read_item``.

    Errors coming from the underlying parsing or I/O primitives are wrapped
    transparently: ``str(error)`` is the original message and ``cause`` keeps
    the original exception.

    ``fatal`` tells whether the reader can still produce records. A recoverable
    error only concerns the current record; iteration can go on. A fatal error
    means the reader will never produce a record again.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        fatal: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.fatal = fatal

    @classmethod
    def wrap(cls, exc: BaseException, fatal: bool = False) -> "ReaderError":
        return cls(str(exc), cause=exc, fatal=fatal)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, fatal={self.fatal})"


class CsvError(ReaderError):
    """A row could not be tokenized or does not match the header."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        fatal: bool = False,
        line: int | None = None,
    ) -> None:
        super().__init__(message, cause=cause, fatal=fatal)
        self.line = line


class JsonError(ReaderError):
    """A value in a JSON stream is malformed."""


class IoError(ReaderError):
    """The underlying file could not be opened or read."""


class InitializationError(ReaderError):
    """The reader is unusable; raised by this package's own logic only."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Reader error : {reason}", fatal=True)
        self.reason = reason

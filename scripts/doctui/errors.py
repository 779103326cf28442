from __future__ import annotations


class DoctransError(Exception):
    """Base class for every error raised by the console."""


class ValidationError(DoctransError):
    pass


class AbortError(DoctransError):
    """The operator cancelled a prompt (Esc or Ctrl+C)."""

    def __init__(self, message: str = "^C") -> None:
        super().__init__(message)


class InputFailure(DoctransError):
    """The interaction surface itself is broken; fatal for the session."""


class TransportError(DoctransError):
    def __init__(self, message: str, status: int = 0, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ParseError(DoctransError):
    pass


class ConfigError(DoctransError):
    pass


class UnsupportedFileError(DoctransError):
    def __init__(self, ext: str) -> None:
        super().__init__(f"{ext or '(none)'} is not supported content type")
        self.ext = ext


FATAL_ERRORS: tuple[type[DoctransError], ...] = (
    InputFailure,
    TransportError,
    ParseError,
    ConfigError,
    UnsupportedFileError,
)

"""Exception hierarchy for the log uploader."""

from typing import Optional


class UploaderError(RuntimeError):
    """Base exception for all uploader errors."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(UploaderError):
    """The run cannot start: missing inputs, missing endpoint or bad settings."""


class LineEncodingError(UploaderError):
    """A line is not valid UTF-8 and the decoding policy is ``strict``."""

    def __init__(self, message: str, *, line: bytes, position: int) -> None:
        super().__init__(
            message,
            hint="Use --encoding-errors replace to substitute invalid bytes.",
        )
        self.line = line
        self.position = position


class UploaderConnectionError(UploaderError):
    """The pre-flight probe against the cluster failed."""

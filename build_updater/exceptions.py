"""
Defines custom exceptions for the updater so callers can tell failure modes apart.
"""

from enum import Enum


class UpdaterError(Exception):
    """Base exception for all updater-specific errors."""


class TransferErrorKind(Enum):
    """Distinguishes why a fetch failed."""

    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"


class TransferError(UpdaterError):
    """Raised when a URL cannot be fetched or its payload cannot be parsed."""

    def __init__(self, message: str, url: str, kind: TransferErrorKind):
        super().__init__(message)
        self.url = url
        self.kind = kind

    @property
    def unreachable(self) -> bool:
        return self.kind is TransferErrorKind.UNREACHABLE


class HashMismatch(UpdaterError):
    """Raised when a downloaded artifact does not match its expected digest."""

    def __init__(self, expected: str, actual: str, path: str):
        super().__init__(
            f"SHA-256 mismatch for '{path}': expected {expected}, got {actual}."
        )
        self.expected = expected
        self.actual = actual
        self.path = path


class AppRunningError(UpdaterError):
    """Raised when the managed application is running during a required swap."""

    def __init__(self, process_name: str):
        super().__init__(
            f"'{process_name}' is running. Close it before the build can be updated."
        )
        self.process_name = process_name


class MissingRemoteFieldError(UpdaterError):
    """Raised when a required section or field is absent from the remote manifest."""

    def __init__(self, field: str):
        kind = "field" if "." in field else "section"
        super().__init__(f"Remote manifest has no '{field}' {kind}.")
        self.field = field


class StateIoError(UpdaterError):
    """Raised when the local manifest record cannot be read or written."""


class SwapError(UpdaterError):
    """Raised when the build directory rename sequence fails."""


class ConfigurationError(UpdaterError):
    """Raised for issues related to configuration loading or validation."""

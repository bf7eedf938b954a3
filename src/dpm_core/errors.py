"""Error taxonomy shared by every dpm_core operation.

A single exception type carries an ``ErrorCode``. Callers branch on
``exc.code`` rather than on exception subclasses; ``recoverable`` tells
them whether repeating the same call could succeed.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_MISMATCH = "VERSION_MISMATCH"
    INVALID_PACKAGE = "INVALID_PACKAGE"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"  # reserved: dependencies are never resolved
    NETWORK_ERROR = "NETWORK_ERROR"
    IO_ERROR = "IO_ERROR"
    FORMAT_ERROR = "FORMAT_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    HASH_MISMATCH = "HASH_MISMATCH"
    SECURITY_ERROR = "SECURITY_ERROR"


_LABELS: dict[ErrorCode, str] = {
    ErrorCode.PACKAGE_NOT_FOUND: "Package not found",
    ErrorCode.VERSION_MISMATCH: "Version mismatch",
    ErrorCode.INVALID_PACKAGE: "Invalid package format",
    ErrorCode.DEPENDENCY_ERROR: "Dependency error",
    ErrorCode.NETWORK_ERROR: "Network error",
    ErrorCode.IO_ERROR: "IO error",
    ErrorCode.FORMAT_ERROR: "JSON error",
    ErrorCode.DATABASE_ERROR: "Database error",
    ErrorCode.HASH_MISMATCH: "Hash verification failed",
    ErrorCode.SECURITY_ERROR: "Security error",
}


class DpmError(Exception):
    """Raised by catalog, transfer, download and store operations."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"{_LABELS[self.code]}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }


class HashMismatchError(DpmError):
    """Downloaded bytes do not match the catalog entry's declared hash."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(ErrorCode.HASH_MISMATCH, f"{expected} != {actual}")
        self.expected = expected
        self.actual = actual


def package_not_found(name: str) -> DpmError:
    return DpmError(ErrorCode.PACKAGE_NOT_FOUND, name)


def network_error(message: str) -> DpmError:
    return DpmError(ErrorCode.NETWORK_ERROR, message, recoverable=True)

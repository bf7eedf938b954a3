"""Content-hash verification for downloaded artifacts.

Declared hashes are either ``"<algorithm>:<hex>"`` (``sha512:ab12...``) or a
bare hex digest read with the configured default algorithm. Comparison is
case-insensitive.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from dpm_core.errors import DpmError, ErrorCode, HashMismatchError


@dataclass(frozen=True)
class DeclaredHash:
    algorithm: str
    hexdigest: str

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hexdigest}"


def _check_algorithm(algorithm: str) -> str:
    algorithm = algorithm.strip().lower()
    # shake_* digests need an explicit length
    if algorithm.startswith("shake_") or algorithm not in hashlib.algorithms_available:
        raise DpmError(ErrorCode.SECURITY_ERROR, f"Unsupported hash algorithm: {algorithm!r}")
    return algorithm


def parse_declared_hash(value: str, default_algorithm: str = "sha256") -> DeclaredHash | None:
    """Parse a catalog hash field. Returns ``None`` when nothing is declared."""
    value = value.strip()
    if not value:
        return None
    algorithm, sep, digest = value.partition(":")
    if not sep:
        algorithm, digest = default_algorithm, value
    return DeclaredHash(algorithm=_check_algorithm(algorithm), hexdigest=digest.strip().lower())


class StreamingHasher:
    """Accumulates a digest and byte count over streamed chunks."""

    def __init__(self, algorithm: str = "sha256") -> None:
        self.algorithm = _check_algorithm(algorithm)
        self._hash = hashlib.new(self.algorithm)
        self.size = 0

    def update(self, chunk: bytes) -> None:
        self._hash.update(chunk)
        self.size += len(chunk)

    @property
    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    @property
    def digest(self) -> str:
        return f"{self.algorithm}:{self.hexdigest}"

    def verify(self, declared: DeclaredHash) -> None:
        """Raise HashMismatchError unless the streamed bytes match *declared*."""
        if declared.algorithm != self.algorithm:
            raise DpmError(
                ErrorCode.SECURITY_ERROR,
                f"Hasher uses {self.algorithm}, declared hash uses {declared.algorithm}",
            )
        if self.hexdigest != declared.hexdigest:
            raise HashMismatchError(expected=str(declared), actual=self.digest)

"""Filesystem abstraction for testability.

This module provides a filesystem abstraction that enables testing
without real I/O operations. The RealFileSystem implementation
wraps standard library operations.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from secure_installer.protocols import FileSystem

# Marker fingerprint for a dependency store that does not exist yet
MISSING_FINGERPRINT = "missing"

_HASH_CHUNK_SIZE = 64 * 1024


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path and os operations.
    Satisfies the FileSystem protocol structurally.
    """

    def list_dir(self, path: Path) -> list[str]:
        """List entry names in a directory."""
        return os.listdir(path)

    def file_size(self, path: Path) -> int | None:
        """Size of a regular file, or None if missing."""
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        if not path.is_file():
            return None
        return stat.st_size

    def sha256_file(self, path: Path) -> str:
        """Hex digest of a file, read in chunks."""
        hasher = hashlib.sha256()
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_HASH_CHUNK_SIZE), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def unlink(self, path: Path, missing_ok: bool = False) -> None:
        """Remove a file."""
        path.unlink(missing_ok=missing_ok)


def directory_fingerprint(fs: FileSystem, path: Path) -> str:
    """Get a hash summarizing a directory's top-level listing.

    Entry names are sorted and joined with ``|`` before hashing, so the
    fingerprint changes whenever an entry is added or removed.

    Args:
        fs: Filesystem to read through.
        path: Directory to fingerprint.

    Returns:
        Hex digest of the listing, or ``MISSING_FINGERPRINT`` if the
        directory cannot be read.
    """
    try:
        names = sorted(fs.list_dir(path))
    except OSError:
        return MISSING_FINGERPRINT
    return hashlib.sha256("|".join(names).encode("utf-8")).hexdigest()

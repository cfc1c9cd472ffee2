"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the services the
install pipeline depends on. Designing to interfaces enables:
- Loose coupling between the pipeline and the network / process layer
- Easy substitution of test doubles (no real HTTP, no real subprocesses)
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from secure_installer.types import InstallOutcome, PackageRequest

if TYPE_CHECKING:
    from secure_installer.http import HttpResponse


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for outbound HTTP access.

    Implementations raise ``HttpError`` for transport failures and timeouts.
    A non-2xx status is not an error at this level; callers inspect it.
    """

    async def get(
        self,
        url: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Fetch a URL and read the full body.

        Args:
            url: Target URL.
            timeout: Total time budget in seconds.
            headers: Optional extra request headers.

        Returns:
            The response status and body.
        """
        ...

    async def download(self, url: str, dest: Path, *, timeout: float) -> int:
        """Stream a URL's body to a file.

        Args:
            url: Target URL.
            dest: File to write. Truncated if it exists.
            timeout: Total time budget in seconds.

        Returns:
            Number of bytes written.

        Raises:
            HttpError: On non-2xx status, transport failure or timeout.
            OSError: If the destination cannot be written.
        """
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running an external command with inherited stdio."""

    async def run(self, argv: list[str]) -> int:
        """Run a command to completion.

        Args:
            argv: Program and arguments.

        Returns:
            The process exit code.
        """
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for the filesystem operations the installers need.

    Abstracts filesystem access to enable testing without real I/O.
    """

    def list_dir(self, path: Path) -> list[str]:
        """List entry names in a directory.

        Raises:
            OSError: If the directory cannot be read.
        """
        ...

    def file_size(self, path: Path) -> int | None:
        """Size of a regular file in bytes, or None if it is missing."""
        ...

    def sha256_file(self, path: Path) -> str:
        """Lowercase hex SHA-256 digest of a file's full content."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        ...

    def unlink(self, path: Path, missing_ok: bool = False) -> None:
        """Remove a file."""
        ...


@runtime_checkable
class PackageInstaller(Protocol):
    """Protocol for per-ecosystem installers.

    Each ecosystem provides one implementation. Installers never raise for
    expected failures; they return a failed ``InstallOutcome`` instead.
    """

    async def install(self, request: PackageRequest) -> InstallOutcome:
        """Install the package named by a resolved request.

        Args:
            request: Request whose ``ecosystem_hint`` names this installer.

        Returns:
            Exactly one outcome for the request.
        """
        ...

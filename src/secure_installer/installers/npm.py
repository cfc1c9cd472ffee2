"""npm installer with empty-install detection."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from secure_installer.filesystem import directory_fingerprint
from secure_installer.protocols import CommandRunner, FileSystem
from secure_installer.types import Ecosystem, FailureKind, InstallOutcome, PackageRequest

from .base import SubprocessInstaller

logger = logging.getLogger(__name__)

# Characters cmd.exe interprets even inside an argument
CMD_METACHARACTERS = frozenset("&|<>^%\"")


class NpmInstaller(SubprocessInstaller):
    """npm installer.

    ``npm install`` exits zero for already-satisfied or silently ignored
    packages, so the exit code alone does not prove anything was installed.
    The dependency store is fingerprinted before and after the command; a
    zero exit with an unchanged fingerprint is reported as a failure.
    """

    ecosystem = Ecosystem.NPM
    program = "npm"

    def __init__(
        self,
        runner: CommandRunner,
        filesystem: FileSystem,
        dependency_store: Path,
        platform: str | None = None,
    ) -> None:
        """Initialize npm installer.

        Args:
            runner: Command runner used to spawn npm.
            filesystem: Filesystem used to fingerprint the store.
            dependency_store: The ``node_modules`` directory npm writes to.
            platform: ``sys.platform`` override (for testing).
        """
        super().__init__(runner)
        self.fs = filesystem
        self.dependency_store = dependency_store
        self.platform = platform or sys.platform

    def build_command(self, name: str) -> list[str]:
        """npm is a .cmd shim on Windows and must go through cmd.exe."""
        if self.platform == "win32":
            return ["cmd.exe", "/c", "npm", "install", name]
        return ["npm", "install", name]

    def target_for(self, request: PackageRequest) -> str:
        """npm accepts ``name@version`` directly, so pass the payload through."""
        return request.payload

    async def install(self, request: PackageRequest) -> InstallOutcome:
        """Install with npm and confirm the dependency store changed."""
        if self.platform == "win32" and CMD_METACHARACTERS.intersection(request.payload):
            logger.warning("Refusing to pass %r through cmd.exe", request.payload)
            return InstallOutcome.failed(
                request.raw_identifier,
                FailureKind.INVALID,
                "package spec contains characters cmd.exe would interpret",
                ecosystem=self.ecosystem,
            )

        before = directory_fingerprint(self.fs, self.dependency_store)

        outcome = await super().install(request)
        if not outcome.success:
            return outcome

        after = directory_fingerprint(self.fs, self.dependency_store)
        if before == after:
            logger.warning(
                "npm reported success for %s but %s is unchanged",
                request.raw_identifier,
                self.dependency_store,
            )
            return InstallOutcome.failed(
                request.raw_identifier,
                FailureKind.EMPTY_INSTALL_DETECTED,
                "no changes detected",
                ecosystem=self.ecosystem,
            )
        return outcome

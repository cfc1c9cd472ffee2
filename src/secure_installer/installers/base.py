"""Base installer for ecosystems that delegate to their own CLI.

Every secondary registry installs the same way: run the ecosystem's install
command with the terminal inherited, wait for it, and read the exit code.
They vary only in the command line.

Pattern: Template Method - base class runs the command and builds the
outcome, subclasses provide `build_command()`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from secure_installer.parser import package_name
from secure_installer.protocols import CommandRunner
from secure_installer.types import Ecosystem, FailureKind, InstallOutcome, PackageRequest

logger = logging.getLogger(__name__)


class SubprocessInstaller(ABC):
    """Base class for installers that shell out to a package manager.

    The native tool's own retry behaviour is authoritative; a nonzero exit
    is reported as-is and never retried here.
    """

    ecosystem: Ecosystem
    program: str

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize installer.

        Args:
            runner: Command runner used to spawn the package manager.
        """
        self.runner = runner

    @abstractmethod
    def build_command(self, name: str) -> list[str]:
        """Get the install command line for a package."""
        ...

    def target_for(self, request: PackageRequest) -> str:
        """Package argument passed to the install command.

        Override in subclasses that need more than the bare name.
        """
        return package_name(request.payload)

    def failure_detail(self) -> str:
        """Reason text for a nonzero exit."""
        return f"{self.ecosystem.value} install failed"

    async def install(self, request: PackageRequest) -> InstallOutcome:
        """Run the install command and map its exit code to an outcome."""
        returncode = await self.runner.run(self.build_command(self.target_for(request)))
        if returncode != 0:
            logger.warning(
                "%s exited with %s for %s", self.program, returncode, request.raw_identifier
            )
            return InstallOutcome.failed(
                request.raw_identifier,
                FailureKind.SUBPROCESS_NONZERO_EXIT,
                self.failure_detail(),
                ecosystem=self.ecosystem,
            )
        return InstallOutcome.ok(request.raw_identifier, ecosystem=self.ecosystem)

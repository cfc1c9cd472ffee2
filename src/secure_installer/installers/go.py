"""Go module installer."""

from __future__ import annotations

from secure_installer.parser import LATEST
from secure_installer.types import Ecosystem, PackageRequest

from .base import SubprocessInstaller


class GoInstaller(SubprocessInstaller):
    """Installs Go commands with ``go install``."""

    ecosystem = Ecosystem.GO
    program = "go"

    def build_command(self, name: str) -> list[str]:
        return ["go", "install", name]

    def target_for(self, request: PackageRequest) -> str:
        """Module path with a version; ``go install`` rejects a bare path."""
        if "@" in request.payload:
            return request.payload
        return f"{request.payload}@{LATEST}"

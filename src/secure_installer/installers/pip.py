"""PyPI installer."""

from __future__ import annotations

from secure_installer.types import Ecosystem, PackageRequest

from .base import SubprocessInstaller


class PipInstaller(SubprocessInstaller):
    """Installs Python packages with pip."""

    ecosystem = Ecosystem.PIP
    program = "pip"

    def build_command(self, name: str) -> list[str]:
        return ["pip", "install", name]

    def target_for(self, request: PackageRequest) -> str:
        # Requirement specifiers (``requests==2.31``) are pip's own syntax
        return request.payload

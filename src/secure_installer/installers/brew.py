"""Homebrew installer."""

from __future__ import annotations

from secure_installer.types import Ecosystem, PackageRequest

from .base import SubprocessInstaller


class BrewInstaller(SubprocessInstaller):
    """Installs formulae with Homebrew."""

    ecosystem = Ecosystem.BREW
    program = "brew"

    def build_command(self, name: str) -> list[str]:
        return ["brew", "install", name]

    def target_for(self, request: PackageRequest) -> str:
        """Versioned formulae (``python@3.12``, ``openssl@3``) keep their ``@``."""
        return request.payload

"""crates.io installer."""

from __future__ import annotations

from secure_installer.types import Ecosystem, PackageRequest

from .base import SubprocessInstaller


class CargoInstaller(SubprocessInstaller):
    """Installs Rust binaries with ``cargo install``."""

    ecosystem = Ecosystem.CARGO
    program = "cargo"

    def build_command(self, name: str) -> list[str]:
        return ["cargo", "install", name]

    def target_for(self, request: PackageRequest) -> str:
        """``cargo install`` accepts ``crate@version`` as-is."""
        return request.payload

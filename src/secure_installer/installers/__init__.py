"""Per-ecosystem installer implementations."""

from __future__ import annotations

from secure_installer.config import Settings
from secure_installer.protocols import CommandRunner, FileSystem, PackageInstaller
from secure_installer.release import ReleasePipeline
from secure_installer.types import Ecosystem

from .base import SubprocessInstaller
from .brew import BrewInstaller
from .cargo import CargoInstaller
from .github import GitHubReleaseInstaller
from .go import GoInstaller
from .npm import NpmInstaller
from .pip import PipInstaller

__all__ = [
    "BrewInstaller",
    "CargoInstaller",
    "GitHubReleaseInstaller",
    "GoInstaller",
    "NpmInstaller",
    "PipInstaller",
    "SECONDARY_INSTALLERS",
    "SubprocessInstaller",
    "build_installers",
]


SECONDARY_INSTALLERS: dict[Ecosystem, type[SubprocessInstaller]] = {
    Ecosystem.PIP: PipInstaller,
    Ecosystem.CARGO: CargoInstaller,
    Ecosystem.GO: GoInstaller,
    Ecosystem.BREW: BrewInstaller,
}


def build_installers(
    runner: CommandRunner,
    filesystem: FileSystem,
    settings: Settings,
    pipeline: ReleasePipeline,
) -> dict[Ecosystem, PackageInstaller]:
    """Create one installer per installable ecosystem.

    Args:
        runner: Command runner shared by subprocess installers.
        filesystem: Filesystem for the npm store fingerprint.
        settings: Location of the npm dependency store.
        pipeline: Release pipeline for GitHub releases.

    Returns:
        Mapping from ecosystem to its installer.
    """
    installers: dict[Ecosystem, PackageInstaller] = {
        Ecosystem.NPM: NpmInstaller(runner, filesystem, settings.dependency_store),
        Ecosystem.GITHUB: GitHubReleaseInstaller(pipeline),
    }
    for ecosystem, installer_class in SECONDARY_INSTALLERS.items():
        installers[ecosystem] = installer_class(runner)
    return installers

"""GitHub release installer."""

from __future__ import annotations

from secure_installer.parser import split_release_payload
from secure_installer.release import ReleasePipeline
from secure_installer.types import Ecosystem, InstallOutcome, PackageRequest


class GitHubReleaseInstaller:
    """Acquires a verified release archive through the release pipeline.

    The outcome is successful only once the download has passed checksum
    verification. Unpacking the archive is left to the caller, which finds
    it at ``InstallOutcome.artifact_path``.
    """

    ecosystem = Ecosystem.GITHUB

    def __init__(self, pipeline: ReleasePipeline) -> None:
        """Initialize installer.

        Args:
            pipeline: Release acquisition pipeline.
        """
        self.pipeline = pipeline

    async def install(self, request: PackageRequest) -> InstallOutcome:
        """Resolve, download and verify ``owner/repo[@tag]``."""
        repository, version = split_release_payload(request.payload)
        result = await self.pipeline.acquire(repository, version)
        if result.failure is not None:
            return InstallOutcome.failed(
                request.raw_identifier,
                result.failure,
                result.detail,
                ecosystem=self.ecosystem,
            )
        return InstallOutcome.ok(
            request.raw_identifier,
            ecosystem=self.ecosystem,
            artifact_path=result.path,
        )

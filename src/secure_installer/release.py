"""Release acquisition pipeline for GitHub-hosted releases.

Four stages, each gated on the previous one:

1. Resolve the release (latest or by tag).
2. Select an archive asset (``.tar.gz`` before ``.zip``, nothing else).
3. Download the asset with linear-backoff retry.
4. Verify the download against ``checksum.sha256`` published at the tag.

The first failing stage ends the pipeline; later stages never run.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pydantic import ValidationError

from secure_installer.config import Settings
from secure_installer.http import HttpError
from secure_installer.parser import LATEST
from secure_installer.protocols import FileSystem, HttpClient
from secure_installer.types import Asset, FailureKind, ReleaseMetadata

logger = logging.getLogger(__name__)

# Archive suffixes in order of preference
SUPPORTED_SUFFIXES = (".tar.gz", ".zip")

CHECKSUM_FILE = "checksum.sha256"

# Checksum text shorter than this is rejected before hashing
MIN_DIGEST_LENGTH = 32

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class StageResult:
    """Outcome of running the pipeline (or one stage of it).

    Attributes:
        success: True if every stage so far succeeded.
        failure: Failure category (None on success).
        detail: Human readable reason (None on success).
        path: Verified download location on success.
    """

    success: bool
    failure: FailureKind | None = None
    detail: str | None = None
    path: Path | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.success and self.failure is not None:
            raise ValueError("success=True but failure is set")
        if not self.success and self.failure is None:
            raise ValueError("success=False requires failure")

    @classmethod
    def ok(cls, path: Path | None = None) -> StageResult:
        return cls(success=True, path=path)

    @classmethod
    def failed(cls, failure: FailureKind, detail: str) -> StageResult:
        return cls(success=False, failure=failure, detail=detail)


@dataclass
class RetryState:
    """Progress of a retrying download.

    Attributes:
        max_attempts: Total attempt budget, first attempt included.
        attempt: Attempts made so far.
        last_error: Reason the most recent attempt failed.
    """

    max_attempts: int
    attempt: int = 0
    last_error: str | None = None

    @property
    def exhausted(self) -> bool:
        """True once the attempt budget is spent."""
        return self.attempt >= self.max_attempts

    def record_failure(self, error: str) -> None:
        self.last_error = error

    def next_delay(self, backoff_base: float) -> float:
        """Delay before the next attempt; grows linearly with attempts made."""
        return backoff_base * self.attempt


def select_asset(assets: Sequence[Asset]) -> Asset | None:
    """Pick the asset to download.

    The first ``.tar.gz`` asset wins, then the first ``.zip``. Any other
    format is rejected rather than guessed at.

    Args:
        assets: Release assets in API order.

    Returns:
        The chosen asset, or None if no supported archive exists.
    """
    for suffix in SUPPORTED_SUFFIXES:
        for asset in assets:
            if asset.name.endswith(suffix):
                return asset
    return None


def checksum_matches(expected_text: str | None, actual_digest: str) -> bool:
    """Compare published checksum text with a computed digest.

    Rejects missing text, and text that is empty or shorter than
    ``MIN_DIGEST_LENGTH`` after trimming, before looking at the digest.
    The comparison is exact and case-sensitive.
    """
    if expected_text is None:
        return False
    expected = expected_text.strip()
    if len(expected) < MIN_DIGEST_LENGTH:
        return False
    return expected == actual_digest


class ReleasePipeline:
    """Resolves, downloads and verifies one GitHub release asset."""

    def __init__(
        self,
        http: HttpClient,
        filesystem: FileSystem,
        settings: Settings,
        sleep: Sleeper | None = None,
    ) -> None:
        """Initialize pipeline with required dependencies.

        Args:
            http: HTTP client for API, download and checksum requests.
            filesystem: Filesystem for size checks and hashing.
            settings: Endpoints, timeouts, attempt budget and download dir.
            sleep: Async sleep used between download attempts.
        """
        self.http = http
        self.fs = filesystem
        self.settings = settings
        self.sleep = sleep or asyncio.sleep
        self._private_dir: Path | None = None

    async def acquire(self, repository: str, version: str = LATEST) -> StageResult:
        """Run all four stages for ``repository`` at ``version``.

        Args:
            repository: ``owner/name`` path of the repository.
            version: Release tag, or ``LATEST``.

        Returns:
            StageResult with the verified file path on success, or the
            failure of the first stage that did not succeed.
        """
        release = await self.resolve_release(repository, version)
        if release is None:
            return StageResult.failed(
                FailureKind.RELEASE_NOT_FOUND,
                f"release not found: {repository}@{version}",
            )

        asset = select_asset(release.assets)
        if asset is None:
            names = ", ".join(a.name for a in release.assets) or "none"
            return StageResult.failed(
                FailureKind.NO_SUPPORTED_ASSET,
                f"no supported asset types in {release.tag} (assets: {names})",
            )

        dest = self.destination_for(asset)
        downloaded = await self.download_with_retry(asset.download_url, dest)
        if not downloaded.success:
            return downloaded

        verified = await self.verify_checksum(repository, release.tag, dest)
        if not verified.success:
            self.fs.unlink(dest, missing_ok=True)
            return verified

        logger.info("Verified %s from %s@%s", asset.name, repository, release.tag)
        return StageResult.ok(dest)

    async def resolve_release(self, repository: str, version: str) -> ReleaseMetadata | None:
        """Fetch release metadata. Not retried.

        Returns:
            Parsed metadata, or None on network error, non-2xx status or
            an unparsable body.
        """
        base = f"{self.settings.github_api_base}/repos/{repository}/releases"
        url = f"{base}/latest" if version == LATEST else f"{base}/tags/{version}"
        try:
            response = await self.http.get(
                url,
                timeout=self.settings.metadata_timeout,
                headers=self.settings.github_headers(),
            )
        except HttpError as e:
            logger.warning("Release lookup for %s failed: %s", repository, e)
            return None
        if not response.ok:
            logger.warning("Release lookup for %s returned %s", repository, response.status)
            return None
        try:
            return ReleaseMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Unparsable release metadata for %s: %s", repository, e)
            return None

    @property
    def download_dir(self) -> Path:
        """Configured download directory, or a private one created on first use.

        The private directory is made with ``tempfile.mkdtemp`` (mode 0700), so
        other users cannot pre-create or swap files at the download path.
        """
        if self.settings.download_dir is not None:
            return self.settings.download_dir
        if self._private_dir is None:
            self._private_dir = Path(tempfile.mkdtemp(prefix="secure-installer-"))
            logger.debug("Downloading into %s", self._private_dir)
        return self._private_dir

    def destination_for(self, asset: Asset) -> Path:
        """Download path for an asset, confined to the download directory."""
        name = PurePosixPath(asset.name.replace("\\", "/")).name
        if name in ("", ".", ".."):
            name = "asset"
        return self.download_dir / name

    async def download_with_retry(self, url: str, dest: Path) -> StageResult:
        """Download ``url`` to ``dest`` within the configured attempt budget.

        A failed attempt is followed by a wait of ``backoff_base * n`` seconds,
        where ``n`` is the number of attempts made so far. No wait follows the
        last attempt. After a reported success the file must exist and be
        non-empty.
        """
        self.fs.mkdir(dest.parent, parents=True, exist_ok=True)
        state = RetryState(max_attempts=self.settings.download_attempts)

        while not state.exhausted:
            state.attempt += 1
            try:
                await self.http.download(url, dest, timeout=self.settings.download_timeout)
            except (HttpError, OSError) as e:
                state.record_failure(str(e))
                logger.warning(
                    "Download attempt %d/%d failed: %s",
                    state.attempt,
                    state.max_attempts,
                    e,
                )
                if not state.exhausted:
                    await self.sleep(state.next_delay(self.settings.backoff_base))
                continue
            return self._check_download(dest)

        self.fs.unlink(dest, missing_ok=True)
        return StageResult.failed(
            FailureKind.DOWNLOAD_FAILED,
            f"download failed after {state.attempt} attempts: {state.last_error}",
        )

    def _check_download(self, dest: Path) -> StageResult:
        size = self.fs.file_size(dest)
        if not size:
            self.fs.unlink(dest, missing_ok=True)
            return StageResult.failed(
                FailureKind.TRUNCATED_OR_EMPTY_DOWNLOAD,
                f"file empty or missing: {dest.name}",
            )
        return StageResult.ok(dest)

    async def fetch_expected_checksum(self, repository: str, tag: str) -> str | None:
        """Fetch the published checksum text, or None if unavailable."""
        url = f"{self.settings.github_raw_base}/{repository}/{tag}/{CHECKSUM_FILE}"
        try:
            response = await self.http.get(url, timeout=self.settings.checksum_timeout)
        except HttpError as e:
            logger.warning("Checksum fetch for %s@%s failed: %s", repository, tag, e)
            return None
        if not response.ok:
            logger.warning(
                "Checksum fetch for %s@%s returned %s", repository, tag, response.status
            )
            return None
        return response.text()

    async def verify_checksum(self, repository: str, tag: str, path: Path) -> StageResult:
        """Verify ``path`` against the checksum published at ``tag``. Not retried."""
        expected = await self.fetch_expected_checksum(repository, tag)
        if expected is None or len(expected.strip()) < MIN_DIGEST_LENGTH:
            return StageResult.failed(
                FailureKind.INTEGRITY_FAILED,
                f"integrity failed: no usable {CHECKSUM_FILE} at {tag}",
            )

        actual = self.fs.sha256_file(path)
        if not checksum_matches(expected, actual):
            logger.warning(
                "Checksum mismatch for %s: expected %s, got %s",
                path.name,
                expected.strip(),
                actual,
            )
            return StageResult.failed(
                FailureKind.INTEGRITY_FAILED,
                f"integrity failed: checksum mismatch for {path.name}",
            )
        return StageResult.ok(path)

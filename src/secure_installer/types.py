"""Shared data types for secure installer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Asset",
    "Ecosystem",
    "FailureKind",
    "InstallOutcome",
    "PackageRequest",
    "ReleaseMetadata",
]


class Ecosystem(str, Enum):
    """Package sources the installer knows how to classify."""

    NPM = "npm"
    GITHUB = "github"
    PIP = "pip"
    CARGO = "cargo"
    GO = "go"
    BREW = "brew"
    SYSTEM_TOOL = "system-tool"
    INVALID = "invalid"

    @property
    def installable(self) -> bool:
        """True if an installer exists for this ecosystem."""
        return self not in (Ecosystem.SYSTEM_TOOL, Ecosystem.INVALID)


class FailureKind(str, Enum):
    """Why a request failed."""

    EMPTY_IDENTIFIER = "empty-identifier"
    INVALID = "invalid"
    SYSTEM_TOOL_NOT_INSTALLABLE = "system-tool-not-installable"
    RELEASE_NOT_FOUND = "release-not-found"
    NO_SUPPORTED_ASSET = "no-supported-asset"
    DOWNLOAD_FAILED = "download-failed"
    TRUNCATED_OR_EMPTY_DOWNLOAD = "truncated-or-empty-download"
    INTEGRITY_FAILED = "integrity-failed"
    SUBPROCESS_NONZERO_EXIT = "subprocess-nonzero-exit"
    EMPTY_INSTALL_DETECTED = "empty-install-detected"
    FATAL = "fatal"


@dataclass(frozen=True)
class PackageRequest:
    """A single package identifier as supplied by the user.

    Attributes:
        raw_identifier: The identifier exactly as given, prefix included.
        ecosystem_hint: Ecosystem named by an explicit prefix or by detection.
        payload: Identifier with any ecosystem prefix stripped.
    """

    raw_identifier: str
    ecosystem_hint: Ecosystem | None
    payload: str

    def with_ecosystem(self, ecosystem: Ecosystem) -> PackageRequest:
        """Return a copy of this request resolved to ``ecosystem``."""
        return replace(self, ecosystem_hint=ecosystem)


class Asset(BaseModel):
    """A downloadable file attached to a release."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    download_url: str = Field(alias="browser_download_url")


class ReleaseMetadata(BaseModel):
    """Release metadata as returned by the GitHub releases API."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tag: str = Field(alias="tag_name", min_length=1)
    assets: tuple[Asset, ...] = ()


@dataclass(frozen=True)
class InstallOutcome:
    """Result of one install request.

    Attributes:
        identifier: The raw identifier the request was made with.
        success: True if the package was installed (or verified, for releases).
        failure_reason: Failure category (None on success).
        detail: Human readable reason (None on success).
        ecosystem: Ecosystem the request was routed to, if it got that far.
        artifact_path: Verified download location for release installs.
    """

    identifier: str
    success: bool
    failure_reason: FailureKind | None = None
    detail: str | None = None
    ecosystem: Ecosystem | None = None
    artifact_path: Path | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.success and self.failure_reason is not None:
            raise ValueError("success=True but failure_reason is set")
        if not self.success and self.failure_reason is None:
            raise ValueError("success=False requires failure_reason")
        if not isinstance(self.identifier, str):
            raise ValueError("identifier must be a string")

    @classmethod
    def ok(
        cls,
        identifier: str,
        ecosystem: Ecosystem | None = None,
        artifact_path: Path | None = None,
    ) -> InstallOutcome:
        """Build a successful outcome."""
        return cls(
            identifier=identifier,
            success=True,
            ecosystem=ecosystem,
            artifact_path=artifact_path,
        )

    @classmethod
    def failed(
        cls,
        identifier: str,
        reason: FailureKind,
        detail: str | None = None,
        ecosystem: Ecosystem | None = None,
    ) -> InstallOutcome:
        """Build a failed outcome. ``detail`` defaults to the reason code."""
        return cls(
            identifier=identifier,
            success=False,
            failure_reason=reason,
            detail=detail or reason.value,
            ecosystem=ecosystem,
        )

"""Ecosystem detection for identifiers without an explicit prefix."""

from __future__ import annotations

import logging
from urllib.parse import quote

from secure_installer.config import Settings
from secure_installer.http import HttpError
from secure_installer.parser import is_repository_shaped, package_name, split_release_payload
from secure_installer.protocols import HttpClient
from secure_installer.types import Ecosystem

logger = logging.getLogger(__name__)


class EcosystemDetector:
    """Classifies unprefixed identifiers by probing in a fixed order.

    1. System-tool allow-list (no network).
    2. GitHub repository existence, for ``owner/name`` identifiers.
    3. npm registry existence.

    The first positive probe wins; if none succeeds the identifier is
    ``Ecosystem.INVALID``. A probe that errors or times out counts as a
    miss and detection moves on to the next probe.
    """

    def __init__(self, http: HttpClient, settings: Settings) -> None:
        """Initialize detector with required dependencies.

        Args:
            http: HTTP client used for probes.
            settings: Probe endpoints, timeout and system-tool list.
        """
        self.http = http
        self.settings = settings

    async def detect(self, identifier: str) -> Ecosystem:
        """Classify an identifier.

        Args:
            identifier: Identifier payload with no ecosystem prefix.

        Returns:
            The detected ecosystem.
        """
        if self.is_system_tool(identifier):
            return Ecosystem.SYSTEM_TOOL

        if is_repository_shaped(identifier):
            repository, _ = split_release_payload(identifier)
            if await self.github_repository_exists(repository):
                return Ecosystem.GITHUB

        if await self.npm_package_exists(package_name(identifier)):
            return Ecosystem.NPM

        logger.info("No ecosystem matched %r", identifier)
        return Ecosystem.INVALID

    def is_system_tool(self, identifier: str) -> bool:
        """Case-insensitive exact match against the system-tool allow-list."""
        lowered = identifier.lower()
        return any(lowered == tool.lower() for tool in self.settings.system_tools)

    async def github_repository_exists(self, repository: str) -> bool:
        """Probe the GitHub API for ``owner/name``."""
        url = f"{self.settings.github_api_base}/repos/{repository}"
        return await self._probe(url, self.settings.github_headers(), "github")

    async def npm_package_exists(self, name: str) -> bool:
        """Probe the npm registry metadata endpoint for ``name``."""
        if not name:
            return False
        url = f"{self.settings.npm_registry_base}/{quote(name, safe='@')}"
        return await self._probe(url, {"Accept": "application/json"}, "npm")

    async def _probe(self, url: str, headers: dict[str, str], label: str) -> bool:
        try:
            response = await self.http.get(
                url, timeout=self.settings.probe_timeout, headers=headers
            )
        except HttpError as e:
            logger.debug("%s probe failed, treating as miss: %s", label, e)
            return False
        logger.debug("%s probe returned %s", label, response.status)
        return response.ok

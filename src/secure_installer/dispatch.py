"""Routes package requests to the installer for their ecosystem."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from secure_installer.detection import EcosystemDetector
from secure_installer.parser import EmptyIdentifierError, parse_identifier
from secure_installer.protocols import PackageInstaller
from secure_installer.results import ResultAggregator
from secure_installer.types import Ecosystem, FailureKind, InstallOutcome, PackageRequest

logger = logging.getLogger(__name__)

SYSTEM_TOOL_REASON = "system tool, install it with your OS package manager"
INVALID_REASON = "no ecosystem found for this identifier"


class Dispatcher:
    """Parses, classifies and installs package identifiers.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use `secure_installer.context.create_context()` for production wiring.
    """

    def __init__(
        self,
        detector: EcosystemDetector,
        installers: dict[Ecosystem, PackageInstaller],
    ) -> None:
        """Initialize dispatcher with required dependencies.

        Args:
            detector: Detector for identifiers without a prefix.
            installers: One installer per installable ecosystem.
        """
        self.detector = detector
        self.installers = installers

    async def classify(self, request: PackageRequest) -> Ecosystem:
        """Ecosystem named by the prefix, or detected if there is none."""
        if request.ecosystem_hint is not None:
            return request.ecosystem_hint
        ecosystem = await self.detector.detect(request.payload)
        logger.debug("Detected %s for %r", ecosystem.value, request.raw_identifier)
        return ecosystem

    async def resolve(self, request: PackageRequest) -> PackageRequest:
        """Fill in the ecosystem of a request, probing if it has no prefix."""
        if request.ecosystem_hint is not None:
            return request
        return request.with_ecosystem(await self.classify(request))

    async def install_one(self, raw: str) -> InstallOutcome:
        """Install a single identifier.

        Never raises: empty identifiers, non-installable ecosystems and
        unexpected errors all come back as failed outcomes.

        Args:
            raw: Identifier as supplied by the user.

        Returns:
            Exactly one outcome for the identifier.
        """
        request: PackageRequest | None = None
        try:
            request = parse_identifier(raw)
            request = await self.resolve(request)
            return await self._dispatch(request)
        except EmptyIdentifierError:
            return InstallOutcome.failed(
                raw, FailureKind.EMPTY_IDENTIFIER, "empty package name"
            )
        except Exception as e:
            logger.exception("Installation failed for %s", raw)
            return InstallOutcome.failed(
                str(raw),
                FailureKind.FATAL,
                f"fatal: {e}",
                ecosystem=request.ecosystem_hint if request else None,
            )

    async def _dispatch(self, request: PackageRequest) -> InstallOutcome:
        ecosystem = request.ecosystem_hint
        if ecosystem is Ecosystem.SYSTEM_TOOL:
            return InstallOutcome.failed(
                request.raw_identifier,
                FailureKind.SYSTEM_TOOL_NOT_INSTALLABLE,
                SYSTEM_TOOL_REASON,
                ecosystem=ecosystem,
            )
        if ecosystem is None or ecosystem is Ecosystem.INVALID:
            return InstallOutcome.failed(
                request.raw_identifier,
                FailureKind.INVALID,
                INVALID_REASON,
                ecosystem=Ecosystem.INVALID,
            )

        installer = self.installers.get(ecosystem)
        if installer is None:
            raise LookupError(f"no installer registered for {ecosystem.value}")
        return await installer.install(request)

    async def install_all(self, identifiers: Sequence[str]) -> ResultAggregator:
        """Install identifiers one at a time, in input order.

        Request N+1 does not start until request N's outcome is recorded,
        so installers never share the dependency store or download paths.

        Args:
            identifiers: Raw identifiers in the order given by the user.

        Returns:
            Aggregator holding one outcome per identifier.
        """
        results = ResultAggregator(len(identifiers))
        for position, raw in enumerate(identifiers):
            outcome = await self.install_one(raw)
            if outcome.success:
                logger.info("Installed %s", raw)
            else:
                logger.info("Failed %s: %s", raw, outcome.detail)
            results.record(position, outcome)
        return results

"""Package identifier parsing.

Identifiers take the form ``[prefix:]payload``. A recognised prefix names the
ecosystem explicitly; anything else is left for detection. Parsing never
touches the network.
"""

from __future__ import annotations

from secure_installer.types import Ecosystem, PackageRequest

# Sentinel version for "whatever the newest release is"
LATEST = "latest"

PREFIXES: dict[str, Ecosystem] = {
    "npm": Ecosystem.NPM,
    "github": Ecosystem.GITHUB,
    "pip": Ecosystem.PIP,
    "cargo": Ecosystem.CARGO,
    "go": Ecosystem.GO,
    "brew": Ecosystem.BREW,
}

PREFIX_SEPARATOR = ":"


class EmptyIdentifierError(ValueError):
    """Identifier has no package name once its prefix is removed."""

    def __init__(self, raw_identifier: str) -> None:
        super().__init__(f"empty package name in {raw_identifier!r}")
        self.raw_identifier = raw_identifier


def parse_identifier(raw: str) -> PackageRequest:
    """Split a raw identifier into its ecosystem hint and payload.

    Prefix matching is exact and case-sensitive: ``npm:left-pad`` is an
    explicit npm request, ``NPM:left-pad`` is not.

    Args:
        raw: Identifier as supplied by the user.

    Returns:
        PackageRequest with ``ecosystem_hint`` set when a prefix matched.

    Raises:
        EmptyIdentifierError: If nothing remains after the prefix, or a
            release identifier has no repository part.

    Example:
        >>> parse_identifier("github:acme/tool@v1.2.0").payload
        'acme/tool@v1.2.0'
    """
    hint: Ecosystem | None = None
    payload = raw

    token, sep, rest = raw.partition(PREFIX_SEPARATOR)
    if sep and token in PREFIXES:
        hint = PREFIXES[token]
        payload = rest

    payload = payload.strip()
    if not payload:
        raise EmptyIdentifierError(raw)
    if hint is Ecosystem.GITHUB:
        repository, _ = split_release_payload(payload)
        if not repository:
            raise EmptyIdentifierError(raw)

    return PackageRequest(raw_identifier=raw, ecosystem_hint=hint, payload=payload)


def split_release_payload(payload: str) -> tuple[str, str]:
    """Split ``owner/repo[@version]`` into repository path and version.

    Args:
        payload: Release identifier without prefix.

    Returns:
        Tuple of (repository, version). Version is ``LATEST`` when absent.
    """
    repository, _, version = payload.partition("@")
    return repository.strip(), version.strip() or LATEST


def package_name(payload: str) -> str:
    """Registry name from a payload, dropping any ``@version`` suffix.

    A leading ``@`` is an npm scope, not a version separator.

    Example:
        >>> package_name("@types/node@20.1.0")
        '@types/node'
    """
    if payload.startswith("@"):
        head, sep, _ = payload[1:].partition("@")
        return "@" + head if sep else payload
    return payload.partition("@")[0]


def is_repository_shaped(payload: str) -> bool:
    """True for ``owner/name`` identifiers (optionally with ``@version``)."""
    repository, _ = split_release_payload(payload)
    owner, sep, name = repository.partition("/")
    return bool(sep and owner and name and "/" not in name)

"""Shared test fixtures."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from secure_installer.config import Settings
from secure_installer.filesystem import RealFileSystem
from secure_installer.http import HttpError, HttpResponse

# ============================================================================
# Fakes
# ============================================================================


class FakeHttpClient:
    """Deterministic HttpClient double.

    Unregistered GET URLs answer 404. Each download URL has a queue of
    results (bytes to write, or an exception to raise); the last entry
    repeats once the queue is down to one.
    """

    def __init__(self) -> None:
        self.routes: dict[str, HttpResponse | Exception] = {}
        self.download_results: dict[str, list[bytes | Exception]] = {}
        self.requests: list[str] = []
        self.download_calls: list[tuple[str, Path]] = []
        self.closed = False

    def add(
        self,
        url: str,
        status: int = 200,
        body: bytes | str = b"",
        json_body: Any = None,
    ) -> None:
        if json_body is not None:
            body = json.dumps(json_body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = HttpResponse(status=status, body=body)

    def fail(self, url: str, error: Exception | None = None) -> None:
        self.routes[url] = error or HttpError(f"timeout for {url}")

    def add_download(self, url: str, *results: bytes | Exception) -> None:
        self.download_results[url] = list(results)

    async def get(
        self,
        url: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        self.requests.append(url)
        result = self.routes.get(url)
        if result is None:
            return HttpResponse(status=404, body=b'{"message": "Not Found"}')
        if isinstance(result, Exception):
            raise result
        return result

    async def download(self, url: str, dest: Path, *, timeout: float) -> int:
        self.download_calls.append((url, dest))
        queue = self.download_results.get(url)
        if not queue:
            raise HttpError(f"Download from {url} returned 404", status=404)
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        dest.write_bytes(result)
        return len(result)

    async def close(self) -> None:
        self.closed = True


class FakeRunner:
    """CommandRunner double that records argv and returns a fixed exit code."""

    def __init__(
        self,
        returncode: int = 0,
        side_effect: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.returncode = returncode
        self.side_effect = side_effect
        self.calls: list[list[str]] = []

    async def run(self, argv: list[str]) -> int:
        self.calls.append(list(argv))
        if self.side_effect is not None:
            self.side_effect(argv)
        return self.returncode


class RecordingSleep:
    """Async sleep double that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_http() -> FakeHttpClient:
    """Create a fake HTTP client with no routes."""
    return FakeHttpClient()


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Create a runner that always exits 0 without side effects."""
    return FakeRunner()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Create a sleep double."""
    return RecordingSleep()


@pytest.fixture
def filesystem() -> RealFileSystem:
    """Real filesystem; tests point it at tmp_path."""
    return RealFileSystem()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with download dir and dependency store under tmp_path."""
    return Settings(
        download_dir=tmp_path / "downloads",
        dependency_store=tmp_path / "node_modules",
        github_token=None,
    )


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = tmp_path / ".secure-installer"
    config_dir.mkdir(parents=True)
    return config_dir


# ============================================================================
# Sample Release Fixtures
# ============================================================================

API = "https://api.github.com"
RAW = "https://raw.githubusercontent.com"
NPM = "https://registry.npmjs.org"

ARCHIVE_BYTES = b"\x1f\x8b\x08\x00fake tarball content"
ARCHIVE_SHA256 = hashlib.sha256(ARCHIVE_BYTES).hexdigest()


def release_json(tag: str, *asset_names: str) -> dict[str, Any]:
    """GitHub release payload with the given asset names."""
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "assets": [
            {
                "name": name,
                "browser_download_url": f"https://github.com/acme/tool/releases/download/{tag}/{name}",
                "size": 1234,
            }
            for name in asset_names
        ],
    }


def asset_url(tag: str, name: str) -> str:
    return f"https://github.com/acme/tool/releases/download/{tag}/{name}"

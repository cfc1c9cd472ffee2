"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so tests can inject fake HTTP clients and command
runners without launching real requests or processes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from secure_installer.config import ConfigManager, Settings
from secure_installer.detection import EcosystemDetector
from secure_installer.dispatch import Dispatcher
from secure_installer.protocols import CommandRunner, FileSystem, HttpClient


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    """

    settings: Settings
    config: ConfigManager
    http: HttpClient
    runner: CommandRunner
    filesystem: FileSystem
    detector: EcosystemDetector
    dispatcher: Dispatcher


def create_context(
    config_dir: Path | None = None,
    settings: Settings | None = None,
    http: HttpClient | None = None,
    runner: CommandRunner | None = None,
    filesystem: FileSystem | None = None,
) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.
    Any service can be overridden, which is how tests substitute fakes.

    Args:
        config_dir: Override config directory (for testing).
        settings: Pre-built settings. Loaded from the config file if None.
        http: HTTP client. Defaults to an aiohttp-backed client.
        runner: Command runner. Defaults to real subprocesses.
        filesystem: Filesystem. Defaults to the real one.

    Returns:
        Configured AppContext with all dependencies.

    Raises:
        ConfigError: If the config file is unreadable or invalid.
    """
    from secure_installer.filesystem import RealFileSystem
    from secure_installer.http import AiohttpClient
    from secure_installer.installers import build_installers
    from secure_installer.release import ReleasePipeline
    from secure_installer.runner import SubprocessRunner

    config = ConfigManager.create(config_dir) if config_dir else ConfigManager.create_default()
    settings = settings or config.load()
    http = http or AiohttpClient.create()
    runner = runner or SubprocessRunner.create()
    filesystem = filesystem or RealFileSystem()

    detector = EcosystemDetector(http, settings)
    pipeline = ReleasePipeline(http, filesystem, settings)
    installers = build_installers(runner, filesystem, settings, pipeline)
    dispatcher = Dispatcher(detector, installers)

    return AppContext(
        settings=settings,
        config=config,
        http=http,
        runner=runner,
        filesystem=filesystem,
        detector=detector,
        dispatcher=dispatcher,
    )

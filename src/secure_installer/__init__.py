"""Multi-ecosystem package installer with verified release downloads."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from secure_installer.protocols import (
    CommandRunner,
    FileSystem,
    HttpClient,
    PackageInstaller,
)

__all__ = [
    "__version__",
    "CommandRunner",
    "FileSystem",
    "HttpClient",
    "PackageInstaller",
]

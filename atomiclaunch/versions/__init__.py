"""Version management module."""

from .download_manager import DownloadManager, DownloadTask
from .installer import InstallReport, VersionInstaller
from .manager import VersionManager
from .maven import MavenCoordinate
from .models import VersionDetails, VersionInfo, VersionLibrary, VersionManifest
from .rules import LibrarySelection, include_library, select_libraries

__all__ = [
    "DownloadManager",
    "DownloadTask",
    "InstallReport",
    "LibrarySelection",
    "MavenCoordinate",
    "VersionDetails",
    "VersionInfo",
    "VersionInstaller",
    "VersionLibrary",
    "VersionManager",
    "VersionManifest",
    "include_library",
    "select_libraries",
]

"""Exception hierarchy for the install and launch pipeline."""

from pathlib import Path
from typing import Optional, Union


class LauncherError(Exception):
    """Base class for every error raised by the launcher core."""


# --- Not found -------------------------------------------------------------

class NotFound(LauncherError):
    """A version, loader, base version or artifact is absent."""


class VersionNotFound(NotFound):
    def __init__(self, version_id: str):
        self.version_id = version_id
        super().__init__(f"Version {version_id} not found in the version manifest")


class VersionNotInstalled(NotFound):
    def __init__(self, version_id: str, path: Union[str, Path]):
        self.version_id = version_id
        self.path = Path(path)
        super().__init__(f"Version {version_id} is not installed (missing {self.path})")


class BaseVersionMissing(NotFound):
    def __init__(self, version_id: str, path: Union[str, Path]):
        self.version_id = version_id
        self.path = Path(path)
        super().__init__(
            f"Base Minecraft version {version_id} not found at {self.path}. "
            f"Please install it first."
        )


class LoaderVersionNotFound(NotFound):
    def __init__(self, loader: str, game_version: str):
        self.loader = loader
        self.game_version = game_version
        super().__init__(f"No {loader} version found for Minecraft {game_version}")


class InstanceNotFound(NotFound):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Instance '{name}' does not exist")


class NativeLibraryMissing(NotFound):
    def __init__(self, path: Union[str, Path], version_id: str):
        self.path = Path(path)
        self.version_id = version_id
        super().__init__(
            f"Native library missing: {self.path}. Please reinstall Minecraft {version_id}"
        )


# --- Transfer --------------------------------------------------------------

class DownloadFailed(LauncherError):
    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None):
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"HTTP {status}" if status is not None else (reason or "transport error")
        if status is not None and reason:
            detail = f"{detail} {reason}"
        super().__init__(f"Failed to download {url}: {detail}")


class IntegrityMismatch(LauncherError):
    def __init__(self, path: Union[str, Path], expected: str, actual: str):
        self.path = Path(path)
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"SHA1 mismatch for {self.path}: expected {expected}, got {actual}"
        )


class InstallCancelled(LauncherError):
    def __init__(self, what: str = "installation"):
        self.what = what
        super().__init__(f"{what} was cancelled")


class LoaderInstallFailed(LauncherError):
    def __init__(self, loader: str, version: str, detail: str):
        self.loader = loader
        self.version = version
        self.detail = detail
        super().__init__(f"{loader} {version} installation failed: {detail}")


# --- Platform gaps ---------------------------------------------------------

class PlatformGap(LauncherError):
    """The runtime cannot work on this platform; launching would crash."""


class NoNativesForPlatform(PlatformGap):
    def __init__(self, platform: str, version_id: str):
        self.platform = platform
        self.version_id = version_id
        super().__init__(
            f"No native libraries found for OS '{platform}' in Minecraft {version_id}. "
            f"Minecraft cannot start without natives."
        )


class NativeExtractionFailed(PlatformGap):
    def __init__(self, jar_count: int):
        self.jar_count = jar_count
        super().__init__(
            f"Found {jar_count} native JARs but failed to extract any files. "
            f"Check file permissions and disk space."
        )


# --- Process ---------------------------------------------------------------

class ProcessSpawnFailed(LauncherError):
    """Java is missing/unusable or the OS refused to start the child."""


class JavaNotFound(ProcessSpawnFailed):
    def __init__(self, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"Java executable not found at {path}"
        else:
            message = ("Java not found. Please install Java or specify a custom "
                       "Java path in settings.")
        super().__init__(message)


class JavaVersionTooOld(ProcessSpawnFailed):
    def __init__(self, found: int, required: int, version_id: str):
        self.found = found
        self.required = required
        self.version_id = version_id
        super().__init__(
            f"Java {found} detected, but Minecraft {version_id} requires Java "
            f"{required} or higher. Please update Java in Settings."
        )


# --- Instances -------------------------------------------------------------

class InstanceError(LauncherError):
    pass


class InvalidName(InstanceError, ValueError):
    def __init__(self, kind: str, value: str, reason: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind} {value!r}: {reason}")


class InstanceExists(InstanceError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Instance '{name}' already exists")


class InstanceAlreadyRunning(InstanceError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Instance '{name}' is already running")


class InstanceNotRunning(InstanceError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Instance '{name}' is not running")

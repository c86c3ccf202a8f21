"""Launcher directories, remote endpoints and user settings."""

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .utils.files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "ATOMIC_LAUNCHER_HOME"
LAUNCHER_NAME = "Atomic Launcher"
MAX_CONCURRENT_DOWNLOADS = 32
DEFAULT_MEMORY_MB = 2048


def default_launcher_dir() -> Path:
    """Per-OS launcher root, overridable with ``ATOMIC_LAUNCHER_HOME``."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    home = Path.home()
    system = platform.system()
    if system == "Windows":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / LAUNCHER_NAME
    if system == "Darwin":
        return home / "Library" / "Application Support" / LAUNCHER_NAME
    return home / ".atomic-launcher"


class LauncherPaths:
    """Filesystem layout shared by every component.

    ``meta/`` holds the content-addressed cache (versions, libraries,
    assets) shared across instances; each instance owns its directory
    under ``instances/``.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else default_launcher_dir()
        self.meta_dir = self.root / "meta"
        self.versions_dir = self.meta_dir / "versions"
        self.libraries_dir = self.meta_dir / "libraries"
        self.assets_dir = self.meta_dir / "assets"
        self.asset_indexes_dir = self.assets_dir / "indexes"
        self.asset_objects_dir = self.assets_dir / "objects"
        self.instances_dir = self.root / "instances"
        self.logs_dir = self.root / "logs"
        self.settings_path = self.root / "settings.json"
        self.launcher_profiles_path = self.meta_dir / "launcher_profiles.json"

    def version_dir(self, version_id: str) -> Path:
        return self.versions_dir / version_id

    def version_json(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.json"

    def version_jar(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.jar"

    def asset_index(self, index_id: str) -> Path:
        return self.asset_indexes_dir / f"{index_id}.json"

    def asset_object(self, sha1: str) -> Path:
        return self.asset_objects_dir / sha1[:2] / sha1

    def instance_dir(self, name: str) -> Path:
        return self.instances_dir / name

    def natives_dir(self, name: str) -> Path:
        return self.instance_dir(name) / "natives"

    def __repr__(self):
        return f"LauncherPaths({str(self.root)!r})"


class Endpoints(BaseModel):
    """Remote endpoints. Values are configuration, tests point them locally."""
    model_config = ConfigDict(frozen=True)

    version_manifest: str = "https://launchermeta.mojang.com/mc/game/version_manifest.json"
    asset_base: str = "https://resources.download.minecraft.net"
    libraries_base: str = "https://libraries.minecraft.net"
    fabric_meta: str = "https://meta.fabricmc.net/v2"
    neoforge_versions: str = (
        "https://maven.neoforged.net/api/maven/versions/releases/net/neoforged/neoforge"
    )
    neoforge_maven: str = "https://maven.neoforged.net/releases"

    def asset_url(self, sha1: str) -> str:
        return f"{self.asset_base.rstrip('/')}/{sha1[:2]}/{sha1}"


class LauncherSettings(BaseModel):
    """Global defaults; an instance may carry its own override copy."""
    javaPath: Optional[str] = None
    memoryMb: int = DEFAULT_MEMORY_MB


def load_settings(path: Path) -> LauncherSettings:
    """Read settings, writing the defaults back when the file is absent."""
    if not path.exists():
        settings = LauncherSettings()
        save_settings(path, settings)
        return settings

    return LauncherSettings(**read_json(path))


def save_settings(path: Path, settings: LauncherSettings):
    write_json_atomic(path, settings.model_dump(mode="json"))
    logger.debug("Saved settings to %s", path)

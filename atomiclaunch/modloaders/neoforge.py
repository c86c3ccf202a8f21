"""NeoForge loader metadata and installation through the official installer."""

import asyncio
import contextlib
import logging
import re
import sys
import tempfile
from collections import deque
from pathlib import Path
from typing import List, Optional

from ..config import Endpoints, LauncherPaths
from ..errors import LoaderInstallFailed, LoaderVersionNotFound, ProcessSpawnFailed
from ..utils.async_http import AsyncHTTPClient
from ..utils.cancellation import CancellationToken
from ..utils.files import write_json_atomic
from ..utils.platform import Platform
from ..utils.validation import validate_version
from ..versions.download_manager import DownloadManager, DownloadTask
from .merger import MergedLaunchProfile, ProfileMerger
from .models import NEOFORGE_PREFIX, LoaderKind, NeoForgeMavenVersions, NeoForgeVersion

logger = logging.getLogger(__name__)

CREATE_NO_WINDOW = 0x08000000
INSTALLER_TAIL_LINES = 40

_NEW_SCHEME_RE = re.compile(r"^(\d+)\.(\d+)")

MINIMAL_LAUNCHER_PROFILES = {
    "profiles": {},
    "settings": {
        "enableSnapshots": False,
        "enableAdvanced": False,
        "crashAssistance": True,
        "enableHistorical": False,
        "enableReleases": True,
        "keepLauncherOpen": False,
        "showGameLog": False,
        "showMenu": False,
        "soundOn": False,
    },
    "version": 3,
}


def parse_minecraft_version(neoforge_version: str) -> Optional[str]:
    """Minecraft version encoded in a ``<minor>.<patch>.x`` NeoForge version.

    ``20.4.237`` is for 1.20.4 and ``21.0.10`` for 1.21.
    """
    clean = neoforge_version.replace("-beta", "").replace("-alpha", "")
    match = _NEW_SCHEME_RE.match(clean)
    if not match:
        return None
    major, minor = int(match.group(1)), int(match.group(2))
    if major < 20:
        return None
    if minor == 0:
        return f"1.{major}"
    return f"1.{major}.{minor}"


def parse_versions(raw_versions: List[str]) -> List[NeoForgeVersion]:
    """Turn the maven version list into entries, newest first."""
    versions = []
    for raw in raw_versions:
        if "snapshot" in raw or "alpha" in raw:
            continue

        mc_version, sep, loader_version = raw.partition("-")
        if sep and mc_version.startswith("1."):
            # Old scheme: ``1.20.1-47.1.0``
            versions.append(NeoForgeVersion(
                minecraftVersion=mc_version,
                neoforgeVersion=loader_version,
                fullVersion=raw,
            ))
            continue

        mc_version = parse_minecraft_version(raw)
        if mc_version is not None:
            versions.append(NeoForgeVersion(
                minecraftVersion=mc_version,
                neoforgeVersion=raw,
                fullVersion=raw,
            ))

    versions.reverse()
    return versions


def full_version(minecraft_version: str, neoforge_version: str) -> str:
    if neoforge_version.startswith(("20.", "21.")):
        return neoforge_version
    return f"{minecraft_version}-{neoforge_version}"


def neoforge_id(minecraft_version: str, neoforge_version: str) -> str:
    return f"{NEOFORGE_PREFIX}{full_version(minecraft_version, neoforge_version)}"


class NeoForgeInstaller:
    """Runs the NeoForge installer jar against the shared ``meta/`` directory.

    The installer writes the loader profile and fetches its own libraries;
    afterwards only the generated version JSON needs to be located.
    """

    def __init__(self, paths: LauncherPaths, http: AsyncHTTPClient,
                 endpoints: Optional[Endpoints] = None,
                 platform: Optional[Platform] = None,
                 java_path: str = "java"):
        self.paths = paths
        self.http = http
        self.endpoints = endpoints or Endpoints()
        self.java_path = java_path
        self.merger = ProfileMerger(paths, platform)

    async def get_versions(self) -> List[NeoForgeVersion]:
        data = await self.http.get(self.endpoints.neoforge_versions)
        return parse_versions(NeoForgeMavenVersions(**data).versions)

    async def get_supported_game_versions(self) -> List[str]:
        versions = await self.get_versions()
        return sorted({v.minecraftVersion for v in versions}, reverse=True)

    async def get_compatible_loader(self, minecraft_version: str) -> str:
        for version in await self.get_versions():
            if version.minecraftVersion == minecraft_version:
                return version.neoforgeVersion
        raise LoaderVersionNotFound("NeoForge", minecraft_version)

    def check_neoforge_installed(self, minecraft_version: str, neoforge_version: str) -> bool:
        version_id = neoforge_id(minecraft_version, neoforge_version)
        return self.paths.version_json(version_id).is_file()

    def installer_url(self, full: str) -> str:
        base = self.endpoints.neoforge_maven.rstrip("/")
        return f"{base}/net/neoforged/neoforge/{full}/neoforge-{full}-installer.jar"

    def ensure_launcher_profile(self):
        """The installer refuses to run without a ``launcher_profiles.json``."""
        path = self.paths.launcher_profiles_path
        if not path.exists():
            write_json_atomic(path, MINIMAL_LAUNCHER_PROFILES)
            logger.debug("Created %s", path)

    def cleanup_install_logs(self, full: str):
        """Remove the logs the installer leaves next to the directory it installs into."""
        names = {"installer.log", "install.log", "neoforge_installer.log",
                 f"neoforge-{full}-installer.jar.log"}
        directory = self.paths.meta_dir
        if not directory.is_dir():
            return
        for entry in directory.iterdir():
            if not entry.is_file():
                continue
            if entry.name in names or ("neoforge" in entry.name and entry.name.endswith(".log")):
                with contextlib.suppress(OSError):
                    entry.unlink()

    async def run_installer(self, installer: Path, full: str, workdir: Path):
        """Run ``java -jar <installer> --installClient <meta>``."""
        kwargs = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = CREATE_NO_WINDOW
        try:
            proc = await asyncio.create_subprocess_exec(
                self.java_path, "-jar", str(installer), "--installClient", str(self.paths.meta_dir),
                cwd=str(workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                **kwargs,
            )
        except OSError as e:
            raise ProcessSpawnFailed(f"Could not start NeoForge installer with {self.java_path}: {e}") from e

        tail = deque(maxlen=INSTALLER_TAIL_LINES)
        async for raw in proc.stdout:
            line = raw.decode("utf-8", errors="replace").rstrip()
            tail.append(line)
            logger.debug("NeoForge installer: %s", line)
        returncode = await proc.wait()

        if returncode != 0:
            raise LoaderInstallFailed(
                "NeoForge", full,
                f"installer exited with code {returncode}\n" + "\n".join(tail),
            )

    async def install_neoforge(self, minecraft_version: str, neoforge_version: str,
                               cancel_token: Optional[CancellationToken] = None) -> MergedLaunchProfile:
        """Install NeoForge on top of an installed vanilla version."""
        validate_version(minecraft_version)
        validate_version(neoforge_version, "loader version")
        full = full_version(minecraft_version, neoforge_version)
        version_id = f"{NEOFORGE_PREFIX}{full}"
        json_path = self.paths.version_json(version_id)

        if json_path.is_file():
            logger.info("NeoForge %s already installed", version_id)
            return self.merger.resolve(version_id)

        self.merger.load_base(minecraft_version)
        self.ensure_launcher_profile()
        logger.info("Installing NeoForge %s for Minecraft %s", full, minecraft_version)

        with tempfile.TemporaryDirectory(prefix="atomiclaunch-neoforge-") as tmp:
            workdir = Path(tmp)
            installer = workdir / f"neoforge-{full}-installer.jar"
            downloader = DownloadManager(self.http, cancel_token=cancel_token)
            await downloader.fetch_many([DownloadTask(self.installer_url(full), installer)])

            if cancel_token is not None:
                cancel_token.raise_if_cancelled(f"Installation of NeoForge {full}")
            try:
                await self.run_installer(installer, full, workdir)
            finally:
                self.cleanup_install_logs(full)

        if not json_path.is_file():
            raise LoaderInstallFailed(
                "NeoForge", full,
                f"installer did not create the expected version JSON at {json_path}",
            )
        logger.info("Created NeoForge profile %s", version_id)
        return self.merger.merge(self.merger.load_loader_profile(version_id), LoaderKind.NEOFORGE)

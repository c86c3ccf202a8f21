"""Fabric loader metadata and installation."""

import logging
from typing import List, Optional

from ..config import Endpoints, LauncherPaths
from ..errors import LoaderVersionNotFound
from ..utils.async_http import AsyncHTTPClient
from ..utils.cancellation import CancellationToken
from ..utils.files import write_json_atomic
from ..utils.platform import Platform
from ..utils.validation import validate_version
from ..versions.download_manager import DownloadManager, DownloadTask
from ..versions.maven import MavenCoordinate
from .merger import MergedLaunchProfile, ProfileMerger
from .models import (
    FabricGameVersion,
    FabricLoaderEntry,
    FabricLoaderVersion,
    LoaderKind,
    LoaderProfile,
)

logger = logging.getLogger(__name__)

FABRIC_MAVEN_URL = "https://maven.fabricmc.net/"


class FabricInstaller:
    """Installs Fabric by copying its libraries; no installer jar involved."""

    def __init__(self, paths: LauncherPaths, http: AsyncHTTPClient,
                 endpoints: Optional[Endpoints] = None,
                 platform: Optional[Platform] = None):
        self.paths = paths
        self.http = http
        self.endpoints = endpoints or Endpoints()
        self.merger = ProfileMerger(paths, platform)

    def _url(self, path: str) -> str:
        return f"{self.endpoints.fabric_meta.rstrip('/')}/{path}"

    @staticmethod
    def fabric_id(minecraft_version: str, loader_version: str) -> str:
        return f"fabric-loader-{loader_version}-{minecraft_version}"

    async def get_loader_versions(self) -> List[FabricLoaderVersion]:
        data = await self.http.get(self._url("versions/loader"))
        return [FabricLoaderVersion(**entry) for entry in data]

    async def get_supported_game_versions(self) -> List[str]:
        data = await self.http.get(self._url("versions/game"))
        return [FabricGameVersion(**entry).version for entry in data]

    async def get_compatible_loader(self, minecraft_version: str) -> str:
        """Newest stable loader for ``minecraft_version``, else the newest listed."""
        data = await self.http.get(self._url(f"versions/loader/{minecraft_version}"))
        entries = [FabricLoaderEntry(**entry) for entry in data]
        loaders = [entry.loader for entry in entries if entry.loader is not None]

        for loader in loaders:
            if loader.stable:
                return loader.version
        if loaders:
            return loaders[0].version
        raise LoaderVersionNotFound("Fabric", minecraft_version)

    async def get_profile_data(self, minecraft_version: str, loader_version: str) -> dict:
        url = self._url(f"versions/loader/{minecraft_version}/{loader_version}/profile/json")
        logger.info("Fetching Fabric profile from %s", url)
        return await self.http.get(url)

    async def get_fabric_profile(self, minecraft_version: str, loader_version: str) -> LoaderProfile:
        return LoaderProfile(**await self.get_profile_data(minecraft_version, loader_version))

    def check_fabric_installed(self, minecraft_version: str, loader_version: str) -> bool:
        return self.paths.version_json(self.fabric_id(minecraft_version, loader_version)).is_file()

    def library_tasks(self, profile: LoaderProfile) -> List[DownloadTask]:
        tasks = []
        for library in profile.libraries:
            coordinate = MavenCoordinate.parse(library.name)
            if coordinate is None:
                logger.warning("Skipping invalid library format: %s", library.name)
                continue
            repository = library.url or FABRIC_MAVEN_URL
            tasks.append(DownloadTask(
                coordinate.url(repository),
                self.paths.libraries_dir / coordinate.path,
                library.sha1,
            ))
        return tasks

    async def install_fabric(self, minecraft_version: str, loader_version: str,
                             cancel_token: Optional[CancellationToken] = None) -> MergedLaunchProfile:
        """Install Fabric ``loader_version`` on top of an installed vanilla version."""
        validate_version(minecraft_version)
        validate_version(loader_version, "loader version")
        logger.info("Installing Fabric Loader %s for Minecraft %s", loader_version, minecraft_version)

        data = await self.get_profile_data(minecraft_version, loader_version)
        profile = LoaderProfile(**data)

        # Fails with BaseVersionMissing before anything is downloaded.
        self.merger.load_base(profile.inheritsFrom)

        downloader = DownloadManager(self.http, cancel_token=cancel_token)
        tasks = self.library_tasks(profile)
        downloaded = await downloader.fetch_many(tasks)
        logger.info("Fabric libraries: %d downloaded, %d total", downloaded, len(tasks))

        write_json_atomic(self.paths.version_json(profile.id), data)
        logger.info("Created Fabric profile %s", profile.id)
        return self.merger.merge(profile, LoaderKind.FABRIC)

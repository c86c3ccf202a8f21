"""Vanilla version installation: client jar, libraries, natives and assets."""

import json
import logging
from typing import List, NamedTuple, Optional

import aiofiles

from ..config import Endpoints, LauncherPaths
from ..errors import NoNativesForPlatform, NotFound
from ..events import EventSink, progress
from ..utils.async_http import AsyncHTTPClient
from ..utils.cancellation import CancellationToken
from ..utils.files import read_json, write_json_atomic
from ..utils.platform import Platform
from ..utils.validation import validate_version
from .download_manager import DownloadManager, DownloadTask
from .manager import VersionManager
from .models import AssetIndexData, VersionDetails
from .rules import LibrarySelection, select_libraries

logger = logging.getLogger(__name__)

ASSET_PROGRESS_STEP = 100


class InstallReport(NamedTuple):
    version_id: str
    regular_libraries: int
    native_libraries: int
    downloaded_files: int
    total_assets: int
    downloaded_assets: int


class VersionInstaller:
    """Installs a vanilla version into the shared ``meta/`` cache.

    The version JSON is written last; its presence means the metadata of a
    previous install can be reused without touching the network.
    """

    def __init__(self, paths: LauncherPaths, http: AsyncHTTPClient,
                 endpoints: Optional[Endpoints] = None,
                 platform: Optional[Platform] = None,
                 events: Optional[EventSink] = None):
        self.paths = paths
        self.http = http
        self.endpoints = endpoints or Endpoints()
        self.platform = platform or Platform.current()
        self.events = events
        self.version_manager = VersionManager(http, self.endpoints)

    def check_version_installed(self, version_id: str) -> bool:
        return (self.paths.version_jar(version_id).is_file()
                and self.paths.version_json(version_id).is_file())

    def load_installed_details(self, version_id: str) -> Optional[VersionDetails]:
        json_path = self.paths.version_json(version_id)
        if not json_path.is_file():
            return None
        return VersionDetails(**read_json(json_path))

    async def resolve_details(self, version_id: str) -> VersionDetails:
        details = self.load_installed_details(version_id)
        if details is not None:
            logger.info("Using installed metadata for %s", version_id)
            return details

        version_info = await self.version_manager.resolve_version_id(version_id)
        logger.info("Found version %s (type: %s)", version_id, version_info.type)
        return await self.version_manager.fetch_details(version_info.url)

    def library_tasks(self, selection: LibrarySelection) -> List[DownloadTask]:
        tasks = {}
        for entry in selection.all:
            artifact = entry.artifact
            url = artifact.url or f"{self.endpoints.libraries_base.rstrip('/')}/{artifact.path}"
            dest = self.paths.libraries_dir / artifact.path
            tasks.setdefault(dest, DownloadTask(url, dest, artifact.sha1))
        return list(tasks.values())

    def asset_tasks(self, index: AssetIndexData) -> List[DownloadTask]:
        # Several names may share one object; fetch each hash once.
        hashes = dict.fromkeys(obj.hash for obj in index.objects.values())
        return [
            DownloadTask(self.endpoints.asset_url(h), self.paths.asset_object(h), h)
            for h in hashes
        ]

    async def install_version(self, version_id: str,
                              cancel_token: Optional[CancellationToken] = None,
                              instance_name: Optional[str] = None) -> InstallReport:
        """Install ``version_id``; a second call on a complete install is network free."""
        validate_version(version_id)
        logger.info("Installing Minecraft %s", version_id)

        def checkpoint():
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(f"Installation of {version_id}")

        checkpoint()
        details = await self.resolve_details(version_id)
        if details.downloads is None or details.downloads.client is None:
            raise NotFound(f"Version {version_id} has no client download")

        selection = select_libraries(details.libraries, self.platform)
        logger.info("Queued %d regular libraries + %d natives for %s",
                    len(selection.regular), len(selection.natives), self.platform)
        if not selection.natives:
            raise NoNativesForPlatform(self.platform.value, version_id)

        downloader = DownloadManager(self.http, cancel_token=cancel_token)

        client = details.downloads.client
        tasks = [DownloadTask(client.url, self.paths.version_jar(version_id), client.sha1)]
        tasks.extend(self.library_tasks(selection))

        progress(self.events, instance_name, f"Downloading libraries for {version_id}...", 0)
        downloaded = await downloader.fetch_many(tasks)
        logger.info("Downloaded %d of %d library files", downloaded, len(tasks))
        checkpoint()

        total_assets = 0
        downloaded_assets = 0
        if details.assetIndex is not None:
            index_path = self.paths.asset_index(details.assetIndex.id)
            await downloader.fetch_many([
                DownloadTask(details.assetIndex.url, index_path, details.assetIndex.sha1)
            ])
            async with aiofiles.open(index_path, 'r', encoding='utf-8') as f:
                index = AssetIndexData(**json.loads(await f.read()))
            checkpoint()

            asset_tasks = self.asset_tasks(index)
            total_assets = len(asset_tasks)

            def on_asset(done: int, total: int):
                if done % ASSET_PROGRESS_STEP == 0 or done == total:
                    progress(self.events, instance_name,
                             f"Downloading assets ({done}/{total})", done * 100 // total)

            downloaded_assets = await downloader.fetch_many(asset_tasks, on_asset)
            logger.info("Downloaded %d assets (%d cached)",
                        downloaded_assets, total_assets - downloaded_assets)
        else:
            logger.warning("Version %s declares no asset index", version_id)

        write_json_atomic(self.paths.version_json(version_id),
                          details.model_dump(mode="json", exclude_none=True))
        logger.info("Minecraft %s installed", version_id)

        return InstallReport(
            version_id=version_id,
            regular_libraries=len(selection.regular),
            native_libraries=len(selection.natives),
            downloaded_files=downloaded,
            total_assets=total_assets,
            downloaded_assets=downloaded_assets,
        )

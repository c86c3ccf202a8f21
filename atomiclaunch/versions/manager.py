"""Version manifest and metadata client."""

import logging
from typing import List, Optional

from ..config import Endpoints
from ..errors import VersionNotFound
from ..utils.async_http import AsyncHTTPClient
from .models import VersionDetails, VersionInfo, VersionManifest

logger = logging.getLogger(__name__)

VERSION_TYPES = ("release", "snapshot", "old_beta", "old_alpha")
VERSION_LIST_LIMIT = 500


class VersionManager:
    """Fetches the remote version catalog and per-version documents.

    Nothing is cached: every call goes to the network. Installs are rare
    compared to launches, and launches only read what the installer wrote.
    """

    def __init__(self, http: AsyncHTTPClient, endpoints: Optional[Endpoints] = None):
        self.http = http
        self.endpoints = endpoints or Endpoints()

    async def fetch_manifest(self) -> VersionManifest:
        """Fetch the launcher version manifest."""
        data = await self.http.get(self.endpoints.version_manifest)
        return VersionManifest(**data)

    async def fetch_details(self, url: str) -> VersionDetails:
        """Fetch and parse version.json for a specific version."""
        data = await self.http.get(url)
        return VersionDetails(**data)

    async def resolve_version_id(self, version_id: str,
                                 manifest: Optional[VersionManifest] = None) -> VersionInfo:
        """Find ``version_id`` in the manifest or raise :class:`VersionNotFound`."""
        if manifest is None:
            manifest = await self.fetch_manifest()

        for version in manifest.versions:
            if version.id == version_id:
                return version
        raise VersionNotFound(version_id)

    async def list_versions(self) -> List[str]:
        manifest = await self.fetch_manifest()
        return [v.id for v in manifest.versions[:VERSION_LIST_LIMIT]]

    async def list_versions_with_metadata(self) -> List[VersionInfo]:
        manifest = await self.fetch_manifest()
        return manifest.versions[:VERSION_LIST_LIMIT]

    async def list_versions_by_type(self, version_type: str) -> List[str]:
        if version_type not in VERSION_TYPES:
            raise ValueError(
                f"Invalid version type. Must be one of: {', '.join(VERSION_TYPES)}"
            )
        manifest = await self.fetch_manifest()
        matching = [v.id for v in manifest.versions if v.type == version_type]
        return matching[:VERSION_LIST_LIMIT]

"""Data models for Minecraft versions."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class MetaModel(BaseModel):
    """Remote documents grow fields over time; keep what we don't model."""
    model_config = ConfigDict(extra="allow")


class DownloadInfo(MetaModel):
    sha1: Optional[str] = None
    size: Optional[int] = None
    url: str


class VersionDownloads(MetaModel):
    client: Optional[DownloadInfo] = None
    server: Optional[DownloadInfo] = None


class VersionLibraryExtractor(MetaModel):
    exclude: Optional[List[str]] = None


class VersionLibraryArtifact(MetaModel):
    path: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[Union[int, str]] = None
    url: Optional[str] = None


class VersionLibraryDownloads(MetaModel):
    artifact: Optional[VersionLibraryArtifact] = None
    classifiers: Optional[Dict[str, VersionLibraryArtifact]] = None


class VersionLibraryRulesOs(MetaModel):
    name: Optional[str] = None
    version: Optional[str] = None
    arch: Optional[str] = None


class VersionLibraryRules(MetaModel):
    action: str
    os: Optional[VersionLibraryRulesOs] = None
    features: Optional[Dict[str, bool]] = None


class VersionLibrary(MetaModel):
    """A library entry.

    Mojang entries carry ``downloads``; Fabric entries only carry a maven
    repository ``url`` (and sometimes a ``sha1``) next to the coordinate.
    """
    name: str
    downloads: Optional[VersionLibraryDownloads] = None
    rules: Optional[List[VersionLibraryRules]] = None
    extract: Optional[VersionLibraryExtractor] = None
    natives: Optional[Dict[str, str]] = None
    url: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None

    @property
    def artifact(self) -> Optional[VersionLibraryArtifact]:
        if self.downloads and self.downloads.artifact and self.downloads.artifact.path:
            return self.downloads.artifact
        return None


class AssetIndexRef(MetaModel):
    id: str
    sha1: Optional[str] = None
    size: Optional[int] = None
    totalSize: Optional[int] = None
    url: str


class AssetObject(MetaModel):
    hash: str
    size: Optional[int] = None


class AssetIndexData(MetaModel):
    objects: Dict[str, AssetObject] = {}


class VersionArguments(MetaModel):
    game: List[Any] = []
    jvm: List[Any] = []


class LatestVersions(MetaModel):
    release: Optional[str] = None
    snapshot: Optional[str] = None


class VersionInfo(MetaModel):
    id: str
    type: str
    url: str
    time: Optional[datetime] = None
    releaseTime: datetime
    sha1: Optional[str] = None
    complianceLevel: int = 0


class VersionManifest(MetaModel):
    latest: LatestVersions
    versions: List[VersionInfo]


class VersionDetails(MetaModel):
    """Parsed ``<version>.json``."""
    id: str
    type: Optional[str] = None
    mainClass: str
    assetIndex: Optional[AssetIndexRef] = None
    assets: Optional[str] = None
    downloads: Optional[VersionDownloads] = None
    libraries: List[VersionLibrary] = []
    minecraftArguments: Optional[str] = None
    arguments: Optional[VersionArguments] = None
    releaseTime: Optional[datetime] = None

    @property
    def assets_id(self) -> str:
        if self.assetIndex is not None:
            return self.assetIndex.id
        return self.assets or "legacy"

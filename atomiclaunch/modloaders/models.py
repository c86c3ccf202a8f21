"""Data models for mod loader metadata and profiles."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from ..versions.models import MetaModel, VersionArguments, VersionLibrary

FABRIC_MARKER = "fabric-loader"
NEOFORGE_PREFIX = "neoforge-"


class LoaderKind(str, Enum):
    FABRIC = "fabric"
    NEOFORGE = "neoforge"

    @classmethod
    def from_version_id(cls, version_id: str) -> Optional["LoaderKind"]:
        """Loader a stored version id belongs to, ``None`` for vanilla."""
        if FABRIC_MARKER in version_id:
            return cls.FABRIC
        if version_id.startswith(NEOFORGE_PREFIX):
            return cls.NEOFORGE
        return None

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["LoaderKind"]:
        """Instance ``loader`` field; ``None`` and ``"vanilla"`` mean no loader."""
        if value is None or value == "vanilla":
            return None
        return cls(value)


class LoaderProfile(MetaModel):
    """A version document that inherits a vanilla version.

    On its own it lacks the client jar, assets and the platform gated
    libraries; those come from ``inheritsFrom``.
    """
    id: str
    inheritsFrom: str
    mainClass: str
    type: Optional[str] = None
    arguments: Optional[VersionArguments] = None
    libraries: List[VersionLibrary] = []


# --- Fabric meta ---------------------------------------------------------

class FabricLoaderVersion(MetaModel):
    separator: Optional[str] = None
    build: Optional[int] = None
    maven: Optional[str] = None
    version: str
    stable: bool = False


class FabricGameVersion(MetaModel):
    version: str
    stable: bool = False


class FabricIntermediary(MetaModel):
    maven: Optional[str] = None
    version: str
    stable: bool = False


class FabricLoaderEntry(MetaModel):
    """One row of ``/versions/loader/<game>``; every part may be absent."""
    loader: Optional[FabricLoaderVersion] = None
    intermediary: Optional[FabricIntermediary] = None


# --- NeoForge meta -------------------------------------------------------

class NeoForgeMavenVersions(MetaModel):
    isSnapshot: bool = False
    versions: List[str] = []


class NeoForgeVersion(BaseModel):
    minecraftVersion: str
    neoforgeVersion: str
    fullVersion: str

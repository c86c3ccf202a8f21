"""Combine a loader profile with the vanilla version it inherits from."""

import logging
from typing import Any, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel

from ..config import LauncherPaths
from ..errors import BaseVersionMissing, VersionNotInstalled
from ..utils.files import read_json
from ..utils.platform import Platform
from ..versions.maven import MavenCoordinate
from ..versions.models import VersionArguments, VersionDetails, VersionLibrary, VersionLibraryRules
from ..versions.rules import include_library
from .models import LoaderKind, LoaderProfile

logger = logging.getLogger(__name__)


class LibraryEntry(NamedTuple):
    name: str
    url: Optional[str] = None
    path: Optional[str] = None


class MergedLaunchProfile(BaseModel):
    """Everything the launcher needs, derived in memory only.

    Loader libraries come first so their classes win on the classpath;
    entries are not de-duplicated.
    """
    versionId: str
    mainClass: str
    baseVersionId: str
    assetsId: str
    libraries: List[LibraryEntry]
    loader: Optional[LoaderKind] = None
    jvmArguments: List[str] = []
    gameArguments: List[str] = []


def flatten_arguments(values: Iterable[Any], platform: Platform) -> List[str]:
    """Keep plain strings and the rule gated entries that apply to ``platform``."""
    flat: List[str] = []
    for value in values:
        if isinstance(value, str):
            flat.append(value)
            continue
        if not isinstance(value, dict):
            continue
        rules = [VersionLibraryRules(**rule) for rule in value.get("rules", [])]
        if not include_library(rules, platform):
            continue
        inner = value.get("value")
        if isinstance(inner, str):
            flat.append(inner)
        elif isinstance(inner, list):
            flat.extend(v for v in inner if isinstance(v, str))
    return flat


def loader_library_entry(library: VersionLibrary) -> LibraryEntry:
    """Loader libraries come from their own maven repositories."""
    artifact = library.artifact
    if artifact is not None:
        return LibraryEntry(library.name, artifact.url or None, artifact.path)
    if library.url:
        coordinate = MavenCoordinate.parse(library.name)
        if coordinate is not None:
            return LibraryEntry(library.name, coordinate.url(library.url), None)
    return LibraryEntry(library.name, None, None)


def project_vanilla(details: VersionDetails,
                    platform: Optional[Platform] = None) -> MergedLaunchProfile:
    """A vanilla version needs no merge, only its rules applied."""
    platform = platform or Platform.current()
    libraries = []
    for library in details.libraries:
        if library.rules and not include_library(library.rules, platform):
            continue
        if library.downloads is None:
            libraries.append(LibraryEntry(library.name))
        elif library.artifact is not None:
            libraries.append(LibraryEntry(library.name, library.artifact.url, library.artifact.path))
    return MergedLaunchProfile(
        versionId=details.id,
        mainClass=details.mainClass,
        baseVersionId=details.id,
        assetsId=details.assets_id,
        libraries=libraries,
    )


def merge_loader_profile(profile: LoaderProfile, base: VersionDetails,
                         loader: Optional[LoaderKind] = None,
                         platform: Optional[Platform] = None) -> MergedLaunchProfile:
    """Loader libraries first, then every base library that has an artifact.

    Base libraries are referenced by relative path only: the vanilla install
    already put them in the library cache.
    """
    platform = platform or Platform.current()
    libraries = [loader_library_entry(lib) for lib in profile.libraries]
    libraries.extend(
        LibraryEntry(lib.name, None, lib.artifact.path)
        for lib in base.libraries
        if lib.artifact is not None
    )

    arguments = profile.arguments or VersionArguments()
    return MergedLaunchProfile(
        versionId=profile.id,
        mainClass=profile.mainClass,
        baseVersionId=profile.inheritsFrom,
        assetsId=base.assets_id,
        libraries=libraries,
        loader=loader or LoaderKind.from_version_id(profile.id),
        jvmArguments=flatten_arguments(arguments.jvm, platform),
        gameArguments=flatten_arguments(arguments.game, platform),
    )


class ProfileMerger:
    """Reads installed version documents and produces launch profiles."""

    def __init__(self, paths: LauncherPaths, platform: Optional[Platform] = None):
        self.paths = paths
        self.platform = platform or Platform.current()

    def load_details(self, version_id: str) -> VersionDetails:
        path = self.paths.version_json(version_id)
        if not path.is_file():
            raise VersionNotInstalled(version_id, path)
        return VersionDetails(**read_json(path))

    def load_base(self, version_id: str) -> VersionDetails:
        """The vanilla version a loader profile inherits from."""
        path = self.paths.version_json(version_id)
        if not path.is_file():
            raise BaseVersionMissing(version_id, path)
        return VersionDetails(**read_json(path))

    def load_loader_profile(self, version_id: str) -> LoaderProfile:
        path = self.paths.version_json(version_id)
        if not path.is_file():
            raise VersionNotInstalled(version_id, path)
        return LoaderProfile(**read_json(path))

    def merge(self, profile: LoaderProfile,
              loader: Optional[LoaderKind] = None) -> MergedLaunchProfile:
        base = self.load_base(profile.inheritsFrom)
        merged = merge_loader_profile(profile, base, loader, self.platform)
        logger.info("Merged %s onto %s: %d libraries",
                    profile.id, profile.inheritsFrom, len(merged.libraries))
        return merged

    def resolve(self, version_id: str) -> MergedLaunchProfile:
        """Launch profile for an installed version id, vanilla or loader."""
        loader = LoaderKind.from_version_id(version_id)
        if loader is None:
            return project_vanilla(self.load_details(version_id), self.platform)
        return self.merge(self.load_loader_profile(version_id), loader)

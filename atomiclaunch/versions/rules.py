"""Platform rule evaluation for libraries and arguments.

This is the single place that decides which libraries apply to a platform
and which of them are natives. The installer and the native stager both go
through :func:`select_libraries`, so they can never disagree on the native
set.
"""

from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

from ..utils.platform import Platform
from .models import VersionLibrary, VersionLibraryArtifact, VersionLibraryRules

NATIVE_MARKER = ":natives-"


def rule_matches(rule: VersionLibraryRules, current_os: Platform) -> bool:
    """A rule without an OS constraint applies everywhere."""
    if rule.features:
        # Launcher features (demo mode, custom resolution, ...) are never enabled.
        return False
    if rule.os is None:
        return True
    return Platform.from_rule_name(rule.os.name) is current_os


def include_library(rules: Optional[Sequence[VersionLibraryRules]],
                    current_os: Union[Platform, str]) -> bool:
    """Decide whether a rule list admits ``current_os``.

    Every rule is visited in order: a matching ``allow`` sets the result, a
    matching ``disallow`` excludes immediately. A list that contains no
    ``allow`` at all includes by default.
    """
    current_os = Platform(current_os)
    rules = rules or []
    allowed = False
    for rule in rules:
        if not rule_matches(rule, current_os):
            continue
        if rule.action == "allow":
            allowed = True
        elif rule.action == "disallow":
            return False
    return allowed or all(rule.action != "allow" for rule in rules)


def is_native(library: VersionLibrary) -> bool:
    return NATIVE_MARKER in library.name or bool(library.natives)


def native_platform(library: VersionLibrary) -> Optional[Platform]:
    """Platform a ``group:artifact:version:natives-<os>`` entry is built for."""
    if NATIVE_MARKER not in library.name:
        return None
    return Platform.from_classifier(library.name)


def legacy_native_artifact(library: VersionLibrary,
                           current_os: Platform) -> Optional[VersionLibraryArtifact]:
    """Classifier artifact of a pre-1.19 style ``natives`` map entry."""
    if not library.natives or not library.downloads or not library.downloads.classifiers:
        return None
    classifier = library.natives.get(current_os.value)
    if not classifier:
        return None
    classifier = classifier.replace("${arch}", Platform.arch_bits())
    artifact = library.downloads.classifiers.get(classifier)
    if artifact is None or not artifact.path:
        return None
    return artifact


class LibraryDownload(NamedTuple):
    library: VersionLibrary
    artifact: VersionLibraryArtifact


class LibrarySelection(NamedTuple):
    regular: List[LibraryDownload]
    natives: List[LibraryDownload]

    @property
    def all(self) -> List[LibraryDownload]:
        return self.regular + self.natives


def select_libraries(libraries: Iterable[VersionLibrary],
                     current_os: Union[Platform, str]) -> LibrarySelection:
    """Split the libraries that apply to ``current_os`` into regular and native.

    Natives built for another OS are skipped silently; an empty native list
    is for the caller to judge.
    """
    current_os = Platform(current_os)
    regular: List[LibraryDownload] = []
    natives: List[LibraryDownload] = []

    for library in libraries:
        if library.rules and not include_library(library.rules, current_os):
            continue

        if NATIVE_MARKER in library.name:
            if native_platform(library) is current_os and library.artifact is not None:
                natives.append(LibraryDownload(library, library.artifact))
            continue

        if library.natives:
            legacy = legacy_native_artifact(library, current_os)
            if legacy is not None:
                natives.append(LibraryDownload(library, legacy))

        if library.artifact is not None:
            regular.append(LibraryDownload(library, library.artifact))

    return LibrarySelection(regular, natives)

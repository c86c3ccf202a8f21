"""Extract platform natives into an instance's private ``natives/`` directory."""

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Optional

from ..config import LauncherPaths
from ..errors import NativeExtractionFailed, NativeLibraryMissing, NoNativesForPlatform
from ..utils.platform import Platform
from ..versions.models import VersionDetails
from ..versions.rules import select_libraries

logger = logging.getLogger(__name__)


def extract_native_jar(jar_path: Path, natives_dir: Path) -> int:
    """Extract one native jar; directories and ``META-INF`` are skipped."""
    root = natives_dir.resolve()
    extracted = 0
    with zipfile.ZipFile(jar_path, 'r') as archive:
        for info in archive.infolist():
            name = info.filename
            if name.endswith("/") or name.startswith("META-INF"):
                continue

            target = (natives_dir / name).resolve()
            if root not in target.parents:
                logger.warning("Skipping %s in %s: escapes the natives directory", name, jar_path)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(info) as src, open(target, 'wb') as dst:
                shutil.copyfileobj(src, dst)
            extracted += 1
    return extracted


class NativeStager:
    """Rebuilds ``instances/<name>/natives`` from the base version's native jars.

    The directory is cleared first so natives from a previous version or
    loader never linger.
    """

    def __init__(self, paths: LauncherPaths, platform: Optional[Platform] = None):
        self.paths = paths
        self.platform = platform or Platform.current()

    def clear(self, instance_name: str) -> Path:
        natives_dir = self.paths.natives_dir(instance_name)
        if natives_dir.exists():
            shutil.rmtree(natives_dir)
        natives_dir.mkdir(parents=True)
        return natives_dir

    def stage_natives(self, instance_name: str, base: VersionDetails) -> Path:
        """Extract every native jar of ``base`` for this platform.

        Raises before anything is launched: a missing jar, no natives for
        this platform, or natives that produced no files are all fatal.
        """
        natives = select_libraries(base.libraries, self.platform).natives
        if not natives:
            raise NoNativesForPlatform(self.platform.value, base.id)

        jars = []
        for entry in natives:
            jar_path = self.paths.libraries_dir / entry.artifact.path
            if not jar_path.is_file():
                raise NativeLibraryMissing(jar_path, base.id)
            jars.append(jar_path)

        natives_dir = self.clear(instance_name)
        extracted = 0
        for jar_path in jars:
            try:
                count = extract_native_jar(jar_path, natives_dir)
            except (OSError, zipfile.BadZipFile) as e:
                logger.error("Failed to extract %s: %s", jar_path, e)
                continue
            logger.debug("Extracted %d files from %s", count, jar_path.name)
            extracted += count

        if extracted == 0:
            raise NativeExtractionFailed(len(jars))

        logger.info("Staged %d native files from %d jars into %s",
                    extracted, len(jars), natives_dir)
        return natives_dir

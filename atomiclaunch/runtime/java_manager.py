"""Java runtime discovery for Minecraft."""

import logging
import os
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import JavaNotFound

logger = logging.getLogger(__name__)

JAVA_BINARY = "java.exe" if platform.system() == "Windows" else "java"
_VERSION_RE = re.compile(r'version "([^"]+)"')

COMMON_JAVA_PATHS = {
    "Windows": [
        Path("C:/Program Files/Java"),
        Path("C:/Program Files/Eclipse Adoptium"),
        Path("C:/Program Files (x86)/Java"),
    ],
    "Darwin": [Path("/Library/Java/JavaVirtualMachines")],
    "Linux": [Path("/usr/lib/jvm")],
}


class JavaManager:
    def __init__(self, extra_search_dirs: Optional[List[Path]] = None):
        self.extra_search_dirs = extra_search_dirs or []

    def _search_dirs(self) -> List[Path]:
        return self.extra_search_dirs + COMMON_JAVA_PATHS.get(platform.system(), [])

    def find_java(self) -> Optional[Path]:
        """Detect installed Java: JAVA_HOME, then PATH, then common locations."""
        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            candidate = Path(java_home) / "bin" / JAVA_BINARY
            if candidate.is_file():
                return candidate

        on_path = shutil.which(JAVA_BINARY)
        if on_path:
            return Path(on_path)

        for base in self._search_dirs():
            if not base.is_dir():
                continue
            for item in sorted(base.iterdir(), reverse=True):
                for java_bin in (item / "bin" / JAVA_BINARY,
                                 item / "Contents" / "Home" / "bin" / JAVA_BINARY):
                    if java_bin.is_file():
                        return java_bin
        return None

    def resolve_java(self, configured: Optional[str] = None) -> Path:
        """Configured path if given, otherwise auto-detected; never ``None``."""
        if configured:
            path = Path(configured)
            if not path.is_file() and shutil.which(configured) is None:
                raise JavaNotFound(configured)
            return path
        found = self.find_java()
        if found is None:
            raise JavaNotFound()
        return found

    @staticmethod
    def parse_java_version(output: str) -> Optional[int]:
        """Major version from ``java -version`` output (``1.8.0_x`` is 8)."""
        match = _VERSION_RE.search(output)
        if not match:
            return None
        parts = match.group(1).split(".")
        try:
            major = int(re.match(r"\d+", parts[0]).group(0))
            if major == 1 and len(parts) > 1:
                major = int(re.match(r"\d+", parts[1]).group(0))
        except (AttributeError, ValueError):
            return None
        return major

    def get_java_version(self, java_path: Path) -> Optional[int]:
        """Get Java major version."""
        try:
            result = subprocess.run([str(java_path), "-version"],
                                    capture_output=True, text=True, timeout=30)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Could not run %s -version: %s", java_path, e)
            return None
        # version is on stderr
        return self.parse_java_version(result.stderr or result.stdout)

    @staticmethod
    def required_java_version(minecraft_version: str) -> int:
        """Minimum Java major for a vanilla Minecraft version id."""
        match = re.match(r"(\d+)\.(\d+)(?:\.(\d+))?", minecraft_version)
        if not match:
            return 8
        major, minor = int(match.group(1)), int(match.group(2))
        patch = int(match.group(3) or 0)
        if major == 1 and minor >= 20:
            if minor > 20 or patch >= 5:
                return 21
            return 17
        if major == 1 and minor >= 18:
            return 17
        return 8

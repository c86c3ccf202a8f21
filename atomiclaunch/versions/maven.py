"""Maven coordinate parsing and repository layout."""

from pathlib import PurePosixPath
from typing import NamedTuple, Optional


class MavenCoordinate(NamedTuple):
    group: str
    artifact: str
    version: str
    classifier: Optional[str] = None
    extension: str = "jar"

    @classmethod
    def parse(cls, name: str) -> Optional["MavenCoordinate"]:
        """Parse ``group:artifact:version[:classifier][@ext]``.

        Returns ``None`` for names that are not a maven coordinate.
        """
        extension = "jar"
        if "@" in name:
            name, extension = name.rsplit("@", 1)
        parts = name.split(":")
        if len(parts) not in (3, 4) or not all(parts):
            return None
        classifier = parts[3] if len(parts) == 4 else None
        return cls(parts[0], parts[1], parts[2], classifier, extension)

    @property
    def filename(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact}-{self.version}{suffix}.{self.extension}"

    @property
    def path(self) -> str:
        """Relative repository path, always ``/`` separated."""
        return str(PurePosixPath(*self.group.split("."), self.artifact, self.version, self.filename))

    def url(self, repository: str) -> str:
        return f"{repository.rstrip('/')}/{self.path}"

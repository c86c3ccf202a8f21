"""Input validation for user supplied names."""

import re

from ..errors import InvalidName

_VERSION_RE = re.compile(r"^[A-Za-z0-9.\-]+$")


def validate_version(value: str, kind: str = "version") -> str:
    """Versions and loader versions are restricted to ``[A-Za-z0-9.-]``."""
    if not value or not _VERSION_RE.match(value):
        raise InvalidName(kind, value, "only letters, digits, '.' and '-' are allowed")
    return value


def sanitize_instance_name(name: str) -> str:
    """Reject names that could escape the instances directory."""
    if not name:
        raise InvalidName("instance name", name, "cannot be empty")
    if ".." in name or "/" in name or "\\" in name:
        raise InvalidName("instance name", name, "contains invalid characters")
    if name.startswith("."):
        raise InvalidName("instance name", name, "cannot start with a dot")
    if "\0" in name:
        raise InvalidName("instance name", name, "contains null bytes")
    return name

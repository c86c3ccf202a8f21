"""Operating system tags used by library rules and native classifiers."""

import platform as _platform
from enum import Enum
from typing import Optional


class Platform(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    OSX = "osx"

    @classmethod
    def current(cls) -> "Platform":
        """Platform of the running interpreter."""
        return cls.from_system(_platform.system())

    @classmethod
    def from_system(cls, system: str) -> "Platform":
        system = system.lower()
        if system.startswith("win"):
            return cls.WINDOWS
        if system in ("darwin", "macos", "osx"):
            return cls.OSX
        return cls.LINUX

    @classmethod
    def from_classifier(cls, text: str) -> Optional["Platform"]:
        """Map a ``natives-<os>`` classifier (or a library name carrying one)."""
        if "natives-windows" in text:
            return cls.WINDOWS
        if "natives-linux" in text:
            return cls.LINUX
        if "natives-macos" in text or "natives-osx" in text:
            return cls.OSX
        return None

    @classmethod
    def from_rule_name(cls, name: Optional[str]) -> Optional["Platform"]:
        """Map the ``os.name`` value of a library rule."""
        if not name:
            return None
        try:
            return cls(name.lower())
        except ValueError:
            return None

    @property
    def classpath_separator(self) -> str:
        return ";" if self is Platform.WINDOWS else ":"

    @staticmethod
    def arch_bits() -> str:
        return "64" if _platform.machine().endswith("64") else "32"

    def __str__(self) -> str:
        return self.value

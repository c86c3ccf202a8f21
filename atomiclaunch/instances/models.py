"""Persisted instance record."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from ..config import LauncherSettings

INSTANCE_FILE = "instance.json"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Instance(BaseModel):
    """One ``instance.json``.

    ``version`` is the id launched: a vanilla id, or the loader profile id
    (``fabric-loader-<loader>-<mc>``, ``neoforge-<v>``) for modded instances.
    """
    name: str
    version: str
    createdAt: str
    lastPlayed: Optional[str] = None
    loader: Optional[str] = None
    loaderVersion: Optional[str] = None
    settingsOverride: Optional[LauncherSettings] = None
    iconPath: Optional[str] = None

    def effective_settings(self, global_settings: LauncherSettings) -> LauncherSettings:
        return self.settingsOverride or global_settings

"""Launch identities."""

from .identity import LaunchIdentity
from .offline import OfflineAuthenticator, offline_uuid

__all__ = ["LaunchIdentity", "OfflineAuthenticator", "offline_uuid"]

"""Offline authentication for Minecraft."""

import hashlib
import re
import uuid

from ..errors import InvalidName
from .identity import LaunchIdentity

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,16}$")


def offline_uuid(username: str) -> str:
    """UUID the vanilla server assigns to ``OfflinePlayer:<name>``."""
    digest = bytearray(hashlib.md5(f"OfflinePlayer:{username}".encode("utf-8")).digest())
    digest[6] = (digest[6] & 0x0F) | 0x30
    digest[8] = (digest[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(digest)))


class OfflineAuthenticator:
    """Offline mode authenticator with username only."""

    @staticmethod
    async def authenticate(username: str) -> LaunchIdentity:
        """Authenticate offline with given username."""
        if not username or not _USERNAME_RE.match(username):
            raise InvalidName("username", username,
                              "offline names are 3-16 letters, digits or '_'")
        return LaunchIdentity(username=username, uuid=offline_uuid(username), access_token="")

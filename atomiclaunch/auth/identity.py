"""Identity handed to the game at launch."""

from typing import NamedTuple


class LaunchIdentity(NamedTuple):
    """Username, UUID and an opaque bearer token.

    The token is only ever placed in the child's environment.
    """
    username: str
    uuid: str
    access_token: str = ""

    def __repr__(self):
        return f"LaunchIdentity(username={self.username!r}, uuid={self.uuid!r})"

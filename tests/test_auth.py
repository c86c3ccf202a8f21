"""Tests for auth module."""

import uuid

import pytest

from atomiclaunch.auth import LaunchIdentity, OfflineAuthenticator, offline_uuid
from atomiclaunch.errors import InvalidName


@pytest.mark.asyncio
async def test_offline_auth():
    """Test offline authentication."""
    identity = await OfflineAuthenticator.authenticate("testuser")
    assert identity.username == "testuser"
    assert identity.access_token == ""
    assert uuid.UUID(identity.uuid).version == 3


@pytest.mark.asyncio
async def test_offline_uuid_is_stable_per_name():
    first = await OfflineAuthenticator.authenticate("Steve")
    second = await OfflineAuthenticator.authenticate("Steve")
    other = await OfflineAuthenticator.authenticate("Alex")
    assert first.uuid == second.uuid == offline_uuid("Steve")
    assert other.uuid != first.uuid


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["", "ab", "a" * 17, "bad name", "x/y"])
async def test_offline_auth_rejects_invalid_names(username):
    with pytest.raises(InvalidName):
        await OfflineAuthenticator.authenticate(username)


def test_identity_repr_hides_token():
    identity = LaunchIdentity("Steve", offline_uuid("Steve"), "secret-token")
    assert "secret-token" not in repr(identity)

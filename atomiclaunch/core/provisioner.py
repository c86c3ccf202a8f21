"""Instance creation and updates: install what is missing, then write the record."""

import logging
import shutil
from typing import Optional

from ..config import Endpoints, LauncherPaths
from ..errors import InstanceError, InstanceExists
from ..events import EventSink, progress
from ..instances.manager import InstanceManager
from ..instances.models import Instance
from ..modloaders.fabric import FabricInstaller
from ..modloaders.merger import ProfileMerger
from ..modloaders.models import FABRIC_MARKER, LoaderKind
from ..modloaders.neoforge import NeoForgeInstaller
from ..utils.async_http import AsyncHTTPClient
from ..utils.cancellation import CancellationToken
from ..utils.platform import Platform
from ..utils.validation import sanitize_instance_name, validate_version
from ..versions.installer import VersionInstaller

logger = logging.getLogger(__name__)


def minecraft_version_of(instance: Instance, merger: Optional[ProfileMerger] = None) -> str:
    """Vanilla version an instance runs on.

    Loader instances answer from the installed profile's ``inheritsFrom``
    when ``merger`` can see it. Otherwise a Fabric id
    ``fabric-loader-<loader>-<game>`` is split after the loader version,
    since game versions such as ``1.21-pre1`` carry dashes of their own.
    """
    kind = LoaderKind.from_version_id(instance.version)
    if kind is None:
        return instance.version
    if merger is not None and merger.paths.version_json(instance.version).is_file():
        return merger.load_loader_profile(instance.version).inheritsFrom
    if kind is not LoaderKind.FABRIC:
        raise InstanceError(
            f"Cannot tell the Minecraft version of '{instance.name}' without its installed profile"
        )

    prefix = f"{FABRIC_MARKER}-"
    if instance.loaderVersion and instance.version.startswith(f"{prefix}{instance.loaderVersion}-"):
        return instance.version[len(prefix) + len(instance.loaderVersion) + 1:]
    return instance.version[len(prefix):].split("-", 1)[-1]


class InstanceProvisioner:
    def __init__(self, paths: LauncherPaths, http: AsyncHTTPClient,
                 endpoints: Optional[Endpoints] = None,
                 platform: Optional[Platform] = None,
                 events: Optional[EventSink] = None,
                 java_path: str = "java"):
        self.paths = paths
        self.events = events
        self.instances = InstanceManager(paths)
        self.installer = VersionInstaller(paths, http, endpoints, platform, events)
        self.fabric = FabricInstaller(paths, http, endpoints, platform)
        self.neoforge = NeoForgeInstaller(paths, http, endpoints, platform, java_path)

    async def ensure_vanilla(self, version: str, instance_name: Optional[str],
                             cancel_token: Optional[CancellationToken] = None):
        if self.installer.check_version_installed(version):
            logger.info("Minecraft %s already installed", version)
            return
        progress(self.events, instance_name, f"Installing Minecraft {version}...", 20)
        await self.installer.install_version(version, cancel_token, instance_name)

    async def create_instance(self, name: str, version: str,
                              loader: Optional[str] = None,
                              loader_version: Optional[str] = None,
                              cancel_token: Optional[CancellationToken] = None) -> Instance:
        """Install the version (and loader) an instance needs, then create it."""
        name = sanitize_instance_name(name)
        validate_version(version)
        kind = LoaderKind.parse(loader)
        if loader_version is not None:
            validate_version(loader_version, "loader version")
        if self.paths.instance_dir(name).exists():
            raise InstanceExists(name)

        progress(self.events, name, "Starting instance creation...", 0)
        progress(self.events, name, f"Checking Minecraft {version}...", 10)
        await self.ensure_vanilla(version, name, cancel_token)
        progress(self.events, name, "Minecraft version ready", 60)

        version_id = version
        if kind is LoaderKind.FABRIC:
            loader_version = loader_version or await self.fabric.get_compatible_loader(version)
            progress(self.events, name, f"Installing Fabric {loader_version}...", 70)
            profile = await self.fabric.install_fabric(version, loader_version, cancel_token)
            version_id = profile.versionId
            progress(self.events, name, "Fabric installation complete", 85)
        elif kind is LoaderKind.NEOFORGE:
            loader_version = loader_version or await self.neoforge.get_compatible_loader(version)
            progress(self.events, name, f"Installing NeoForge {loader_version}...", 70)
            profile = await self.neoforge.install_neoforge(version, loader_version, cancel_token)
            version_id = profile.versionId
            progress(self.events, name, "NeoForge installation complete", 85)
        else:
            loader_version = None

        progress(self.events, name, "Creating instance structure...", 90)
        instance = self.instances.create(name, version_id, kind.value if kind else None, loader_version)
        progress(self.events, name, "Instance created successfully!", 100)
        return instance

    async def update_fabric_loader(self, name: str, fabric_version: str,
                                   cancel_token: Optional[CancellationToken] = None) -> Instance:
        validate_version(fabric_version, "loader version")
        instance = self.instances.get(name)
        if LoaderKind.parse(instance.loader) is not LoaderKind.FABRIC:
            raise InstanceError(f"Instance '{instance.name}' is not using Fabric loader")

        profile = await self.fabric.install_fabric(
            minecraft_version_of(instance, self.fabric.merger), fabric_version, cancel_token
        )
        instance.version = profile.versionId
        instance.loaderVersion = fabric_version
        self.instances.save(instance)
        return instance

    async def update_minecraft_version(self, name: str, new_version: str,
                                       cancel_token: Optional[CancellationToken] = None) -> Instance:
        """Move an instance to another Minecraft version.

        Fabric instances get the newest compatible loader for the new version.
        """
        validate_version(new_version)
        instance = self.instances.get(name)
        kind = LoaderKind.parse(instance.loader)
        if kind is LoaderKind.NEOFORGE:
            raise InstanceError(
                f"Instance '{instance.name}' uses NeoForge; create a new instance instead"
            )

        await self.ensure_vanilla(new_version, instance.name, cancel_token)

        if kind is LoaderKind.FABRIC:
            progress(self.events, instance.name, "Finding compatible Fabric loader...")
            loader_version = await self.fabric.get_compatible_loader(new_version)
            progress(self.events, instance.name, f"Installing Fabric loader {loader_version}...")
            profile = await self.fabric.install_fabric(new_version, loader_version, cancel_token)
            instance.version = profile.versionId
            instance.loaderVersion = loader_version
        else:
            instance.version = new_version

        progress(self.events, instance.name, "Updating instance metadata...")
        natives_dir = self.paths.natives_dir(instance.name)
        if natives_dir.exists():
            shutil.rmtree(natives_dir)
        self.instances.save(instance)
        progress(self.events, instance.name, "Complete!")
        return instance

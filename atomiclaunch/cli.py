"""Command line front end."""

import asyncio
import functools
import logging
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .auth import OfflineAuthenticator
from .config import LauncherPaths, load_settings
from .core import GameLauncher, InstanceProvisioner
from .errors import LauncherError
from .events import LoggingEventSink
from .instances import InstanceManager
from .modloaders import FabricInstaller, NeoForgeInstaller
from .runtime import JavaManager
from .utils import AsyncHTTPClient, setup_logging
from .versions import VersionInstaller, VersionManager
from .versions.manager import VERSION_TYPES

logger = logging.getLogger(__name__)


def launcher_errors(func):
    """Report launcher errors as a one line message instead of a traceback."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LauncherError as e:
            logger.debug("Command failed", exc_info=True)
            raise click.ClickException(str(e)) from e
    return wrapper


def java_for_installers(paths: LauncherPaths) -> str:
    settings = load_settings(paths.settings_path)
    found = JavaManager().find_java()
    return settings.javaPath or (str(found) if found else "java")


@click.group()
@click.version_option(version=__version__)
@click.option("--home", type=click.Path(file_okay=False, path_type=Path),
              help="Launcher directory (defaults to ATOMIC_LAUNCHER_HOME or the OS default)")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to the console")
@click.pass_context
def cli(ctx, home: Optional[Path], verbose: bool):
    """Install and launch Minecraft instances."""
    paths = LauncherPaths(home)
    setup_logging(paths.logs_dir, logging.DEBUG if verbose else logging.INFO)
    ctx.obj = paths


@cli.command()
@click.option("--type", "version_type", type=click.Choice(VERSION_TYPES), help="Only this release type")
@click.option("--limit", "-l", default=20, help="Maximum number of versions to show")
@launcher_errors
def versions(version_type: Optional[str], limit: int):
    """List Minecraft versions from the manifest."""
    async def run():
        async with AsyncHTTPClient() as http:
            manager = VersionManager(http)
            if version_type:
                return await manager.list_versions_by_type(version_type)
            return await manager.list_versions()

    for version_id in asyncio.run(run())[:limit]:
        click.echo(version_id)


@cli.command()
@click.argument("version")
@click.pass_obj
@launcher_errors
def install(paths: LauncherPaths, version: str):
    """Install a vanilla Minecraft version."""
    async def run():
        async with AsyncHTTPClient() as http:
            installer = VersionInstaller(paths, http, events=LoggingEventSink())
            return await installer.install_version(version)

    report = asyncio.run(run())
    click.echo(f"Installed {report.version_id}: {report.downloaded_files} files and "
               f"{report.downloaded_assets}/{report.total_assets} assets downloaded")


@cli.command("install-fabric")
@click.argument("minecraft_version")
@click.argument("loader_version", required=False)
@click.pass_obj
@launcher_errors
def install_fabric(paths: LauncherPaths, minecraft_version: str, loader_version: Optional[str]):
    """Install Fabric on an installed Minecraft version."""
    async def run():
        async with AsyncHTTPClient() as http:
            fabric = FabricInstaller(paths, http)
            version = loader_version or await fabric.get_compatible_loader(minecraft_version)
            return await fabric.install_fabric(minecraft_version, version)

    profile = asyncio.run(run())
    click.echo(f"Installed {profile.versionId} ({len(profile.libraries)} libraries)")


@cli.command("install-neoforge")
@click.argument("minecraft_version")
@click.argument("loader_version", required=False)
@click.pass_obj
@launcher_errors
def install_neoforge(paths: LauncherPaths, minecraft_version: str, loader_version: Optional[str]):
    """Install NeoForge on an installed Minecraft version."""
    async def run():
        async with AsyncHTTPClient() as http:
            neoforge = NeoForgeInstaller(paths, http, java_path=java_for_installers(paths))
            version = loader_version or await neoforge.get_compatible_loader(minecraft_version)
            return await neoforge.install_neoforge(minecraft_version, version)

    profile = asyncio.run(run())
    click.echo(f"Installed {profile.versionId} ({len(profile.libraries)} libraries)")


@cli.command()
@click.argument("name")
@click.argument("version")
@click.option("--loader", type=click.Choice(["vanilla", "fabric", "neoforge"]), default="vanilla")
@click.option("--loader-version", help="Loader version (defaults to the newest compatible one)")
@click.pass_obj
@launcher_errors
def create(paths: LauncherPaths, name: str, version: str, loader: str, loader_version: Optional[str]):
    """Create an instance, installing whatever it needs."""
    async def run():
        async with AsyncHTTPClient() as http:
            provisioner = InstanceProvisioner(
                paths, http, events=LoggingEventSink(),
                java_path=java_for_installers(paths),
            )
            return await provisioner.create_instance(name, version, loader, loader_version)

    instance = asyncio.run(run())
    click.echo(f"Created instance {instance.name} ({instance.version})")


@cli.command()
@click.argument("name")
@click.option("--username", "-u", default="Player", help="Offline username")
@click.option("--detach", is_flag=True, help="Return as soon as the game has started")
@click.pass_obj
@launcher_errors
def launch(paths: LauncherPaths, name: str, username: str, detach: bool):
    """Launch an instance with an offline identity."""
    identity = asyncio.run(OfflineAuthenticator.authenticate(username))
    launcher = GameLauncher(paths, events=LoggingEventSink())
    launcher.launch(name, identity)
    click.echo(f"Started {name}")

    process = launcher.registry.get(name)
    if detach or process is None:
        return
    try:
        exit_code = process.wait()
    except KeyboardInterrupt:
        launcher.kill(name)
        exit_code = process.wait()
    click.echo(f"{name} exited with code {exit_code}")


@cli.command()
@click.pass_obj
@launcher_errors
def instances(paths: LauncherPaths):
    """List instances."""
    for instance in InstanceManager(paths).list():
        loader = instance.loader or "vanilla"
        played = instance.lastPlayed or "never"
        click.echo(f"{instance.name}\t{instance.version}\t{loader}\tlast played: {played}")


def main():
    cli(prog_name="atomiclaunch")


if __name__ == "__main__":
    main()

"""Game launcher for Minecraft."""

import logging
import os
import subprocess
from enum import Enum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from ..auth.identity import LaunchIdentity
from ..config import LauncherPaths, LauncherSettings, load_settings
from ..errors import (
    InstanceAlreadyRunning,
    JavaVersionTooOld,
    ProcessSpawnFailed,
    VersionNotInstalled,
)
from ..events import EventSink, console
from ..instances.manager import InstanceManager
from ..instances.models import Instance
from ..modloaders.merger import MergedLaunchProfile, ProfileMerger
from ..runtime.java_manager import JavaManager
from ..utils.platform import Platform
from ..versions.maven import MavenCoordinate
from ..versions.models import VersionDetails
from .natives import NativeStager
from .process import (
    ACCESS_TOKEN_ENV,
    OutputForwarder,
    ProcessRegistry,
    start_exit_watcher,
    start_reader,
)

logger = logging.getLogger(__name__)


class LaunchState(str, Enum):
    IDLE = "idle"
    METADATA_LOADED = "metadata_loaded"
    CLASSPATH_BUILT = "classpath_built"
    NATIVES_STAGED = "natives_staged"
    PROCESS_SPAWNED = "process_spawned"
    RUNNING = "running"
    EXITED = "exited"


class LaunchPlan(NamedTuple):
    instance: Instance
    profile: MergedLaunchProfile
    command: List[str]
    env: Dict[str, str]
    cwd: Path


class LaunchAttempt:
    """Tracks one launch through its states; any failure leaves it where it was."""

    def __init__(self, instance_name: str):
        self.instance_name = instance_name
        self.state = LaunchState.IDLE
        self.exit_code: Optional[int] = None

    def advance(self, expected: LaunchState, new: LaunchState):
        if self.state is not expected:
            raise RuntimeError(
                f"Launch of {self.instance_name} is {self.state.value}, expected {expected.value}"
            )
        logger.debug("Launch %s: %s -> %s", self.instance_name, self.state.value, new.value)
        self.state = new

    def exited(self, exit_code: int):
        self.exit_code = exit_code
        self.state = LaunchState.EXITED


class GameLauncher:
    """Turns an installed instance into a running game process."""

    def __init__(self, paths: LauncherPaths,
                 registry: Optional[ProcessRegistry] = None,
                 events: Optional[EventSink] = None,
                 platform: Optional[Platform] = None,
                 java_manager: Optional[JavaManager] = None,
                 settings: Optional[LauncherSettings] = None):
        self.paths = paths
        self.registry = registry or ProcessRegistry()
        self.events = events
        self.platform = platform or Platform.current()
        self.java_manager = java_manager or JavaManager()
        self.settings = settings
        self.instances = InstanceManager(paths)
        self.merger = ProfileMerger(paths, self.platform)
        self.stager = NativeStager(paths, self.platform)

    def effective_settings(self, instance: Instance) -> LauncherSettings:
        global_settings = self.settings
        if global_settings is None:
            global_settings = load_settings(self.paths.settings_path)
        return instance.effective_settings(global_settings)

    def resolve_java(self, instance: Instance, settings: LauncherSettings,
                     base_version_id: str) -> Path:
        """Configured or detected Java, checked against the version's minimum."""
        java_path = self.java_manager.resolve_java(settings.javaPath)
        required = self.java_manager.required_java_version(base_version_id)
        found = self.java_manager.get_java_version(java_path)
        if found is None:
            console(self.events, instance.name,
                    f"WARNING: Could not determine Java version of {java_path}. "
                    f"Minecraft {base_version_id} requires Java {required}.")
        elif found < required:
            raise JavaVersionTooOld(found, required, base_version_id)
        else:
            logger.info("Using Java %d at %s (requires %d)", found, java_path, required)
        return java_path

    def load_base_details(self, profile: MergedLaunchProfile) -> VersionDetails:
        if profile.loader is None:
            return self.merger.load_details(profile.baseVersionId)
        return self.merger.load_base(profile.baseVersionId)

    def get_library_path(self, name: str, artifact_path: Optional[str]) -> Optional[Path]:
        """Resolve library JAR path."""
        if artifact_path:
            return self.paths.libraries_dir / artifact_path
        coordinate = MavenCoordinate.parse(name)
        if coordinate is None:
            return None
        return self.paths.libraries_dir / coordinate.path

    def assemble_classpath(self, instance: Instance, profile: MergedLaunchProfile) -> List[str]:
        """Library jars in profile order, then the base client jar.

        Missing libraries are skipped with a warning; a missing client jar
        is fatal.
        """
        paths = []
        for entry in profile.libraries:
            lib_path = self.get_library_path(entry.name, entry.path)
            if lib_path is None:
                logger.warning("Skipping invalid library name %s", entry.name)
                continue
            if lib_path.is_file():
                paths.append(str(lib_path))
            else:
                logger.warning("Library not found: %s", lib_path)
                console(self.events, instance.name, f"WARNING: Library not found: {lib_path}")

        client_jar = self.paths.version_jar(profile.baseVersionId)
        if not client_jar.is_file():
            raise VersionNotInstalled(profile.baseVersionId, client_jar)
        paths.append(str(client_jar))
        return paths

    def substitute(self, args: List[str], profile: MergedLaunchProfile, natives_dir: Path) -> List[str]:
        values = {
            "${library_directory}": str(self.paths.libraries_dir),
            "${classpath_separator}": self.platform.classpath_separator,
            "${version_name}": profile.versionId,
            "${natives_directory}": str(natives_dir),
        }
        result = []
        for arg in args:
            for key, value in values.items():
                arg = arg.replace(key, value)
            result.append(arg)
        return result

    def build_jvm_args(self, profile: MergedLaunchProfile, settings: LauncherSettings,
                       java_path: Path, natives_dir: Path, classpath: List[str]) -> List[str]:
        """Java executable, JVM flags, classpath and main class."""
        args = [
            str(java_path),
            f"-Xmx{settings.memoryMb}M",
            f"-Xms{settings.memoryMb}M",
            f"-Djava.library.path={natives_dir}",
        ]
        args.extend(self.substitute(profile.jvmArguments, profile, natives_dir))
        args.extend(["-cp", self.platform.classpath_separator.join(classpath)])
        args.append(profile.mainClass)
        return args

    def build_game_args(self, instance: Instance, profile: MergedLaunchProfile,
                        identity: LaunchIdentity, natives_dir: Path) -> List[str]:
        """Game arguments; the access token travels in the environment instead."""
        args = [
            "--username", identity.username,
            "--uuid", identity.uuid,
            "--version", profile.versionId,
            "--gameDir", str(self.paths.instance_dir(instance.name)),
            "--assetsDir", str(self.paths.assets_dir),
            "--assetIndex", profile.assetsId,
        ]
        args.extend(self.substitute(profile.gameArguments, profile, natives_dir))
        return args

    def build_environment(self, identity: LaunchIdentity) -> Dict[str, str]:
        env = os.environ.copy()
        env[ACCESS_TOKEN_ENV] = identity.access_token
        return env

    def prepare_launch(self, attempt: LaunchAttempt, identity: LaunchIdentity) -> LaunchPlan:
        """Everything up to, but not including, the spawn."""
        instance = self.instances.get(attempt.instance_name)
        settings = self.effective_settings(instance)
        profile = self.merger.resolve(instance.version)
        base = self.load_base_details(profile)
        attempt.advance(LaunchState.IDLE, LaunchState.METADATA_LOADED)

        java_path = self.resolve_java(instance, settings, profile.baseVersionId)
        classpath = self.assemble_classpath(instance, profile)
        logger.info("Classpath for %s: %d entries", instance.name, len(classpath))
        attempt.advance(LaunchState.METADATA_LOADED, LaunchState.CLASSPATH_BUILT)

        natives_dir = self.stager.stage_natives(instance.name, base)
        attempt.advance(LaunchState.CLASSPATH_BUILT, LaunchState.NATIVES_STAGED)

        command = self.build_jvm_args(profile, settings, java_path, natives_dir, classpath)
        command.extend(self.build_game_args(instance, profile, identity, natives_dir))
        return LaunchPlan(
            instance=instance,
            profile=profile,
            command=command,
            env=self.build_environment(identity),
            cwd=self.paths.instance_dir(instance.name),
        )

    def launch_game(self, plan: LaunchPlan) -> subprocess.Popen:
        """Launch the game process."""
        try:
            return subprocess.Popen(
                plan.command,
                cwd=str(plan.cwd),
                env=plan.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ProcessSpawnFailed(
                f"Failed to spawn Minecraft process: {e}. Check if Java path is correct: "
                f"{plan.command[0]}"
            ) from e

    def launch(self, instance_name: str, identity: LaunchIdentity) -> LaunchAttempt:
        """Launch ``instance_name`` and return once the child is running."""
        if self.registry.is_running(instance_name):
            raise InstanceAlreadyRunning(instance_name)

        attempt = LaunchAttempt(instance_name)
        plan = self.prepare_launch(attempt, identity)

        logger.info("Launching %s (%s, main class %s)",
                    instance_name, plan.profile.versionId, plan.profile.mainClass)
        process = self.launch_game(plan)
        try:
            self.registry.register(instance_name, process)
        except InstanceAlreadyRunning:
            process.terminate()
            raise
        attempt.advance(LaunchState.NATIVES_STAGED, LaunchState.PROCESS_SPAWNED)
        logger.info("Minecraft process started (pid %s)", process.pid)

        start_reader(process.stdout, OutputForwarder(instance_name, "stdout", self.events))
        start_reader(process.stderr, OutputForwarder(instance_name, "stderr", self.events))
        start_exit_watcher(instance_name, process, self.registry, self.events, attempt.exited)

        self.instances.mark_played(instance_name)
        if attempt.state is LaunchState.PROCESS_SPAWNED:
            attempt.state = LaunchState.RUNNING
        return attempt

    def kill(self, instance_name: str):
        self.registry.kill(instance_name)

"""Supervision of running game processes."""

import logging
import subprocess
import threading
from typing import IO, Callable, Dict, Iterable, List, Optional

from ..errors import InstanceAlreadyRunning, InstanceNotRunning
from ..events import EventSink, InstanceExitedEvent, console, emit

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV = "MINECRAFT_ACCESS_TOKEN"
REDACTED_MARKERS = ("accessToken", ACCESS_TOKEN_ENV)

STDERR_HINTS = (
    ("UnsupportedClassVersionError",
     "ERROR: Wrong Java version! This Minecraft version requires a newer Java version. "
     "Please update Java in Settings."),
    ("class file version 65.0",
     "ERROR: Java version too old! You need Java 21 or newer."),
    ("class file version 61.0",
     "ERROR: Java version too old! You need Java 17 or newer."),
    ("Could not find or load main class",
     "ERROR: Game files are corrupted or missing. Try reinstalling this Minecraft version."),
    ("java.lang.OutOfMemoryError",
     "ERROR: Not enough memory allocated! Increase RAM allocation in Settings."),
)


def is_redacted(line: str) -> bool:
    """Lines that could carry the access token never leave the reader."""
    return any(marker in line for marker in REDACTED_MARKERS)


def stderr_hint(line: str) -> Optional[str]:
    for needle, hint in STDERR_HINTS:
        if needle in line:
            return hint
    return None


class ProcessRegistry:
    """Running game processes keyed by instance name.

    Owned by the launcher and handed to whoever needs to kill a game; all
    access goes through the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._processes: Dict[str, subprocess.Popen] = {}

    def register(self, name: str, process: subprocess.Popen):
        with self._lock:
            if name in self._processes:
                raise InstanceAlreadyRunning(name)
            self._processes[name] = process

    def unregister(self, name: str, process: Optional[subprocess.Popen] = None):
        with self._lock:
            if process is None or self._processes.get(name) is process:
                self._processes.pop(name, None)

    def get(self, name: str) -> Optional[subprocess.Popen]:
        with self._lock:
            return self._processes.get(name)

    def is_running(self, name: str) -> bool:
        return self.get(name) is not None

    def running(self) -> List[str]:
        with self._lock:
            return sorted(self._processes)

    def kill(self, name: str):
        """Terminate the game with an OS signal; there is no graceful shutdown."""
        process = self.get(name)
        if process is None:
            raise InstanceNotRunning(name)
        logger.info("Killing instance %s (pid %s)", name, process.pid)
        process.terminate()


class OutputForwarder:
    """Forwards one stream of the child to the event sink, line by line."""

    def __init__(self, instance_name: str, stream: str, events: Optional[EventSink]):
        self.instance_name = instance_name
        self.stream = stream
        self.events = events
        self.hint_shown = False

    def forward(self, line: str):
        line = line.rstrip("\r\n")
        if is_redacted(line):
            return
        logger.debug("[%s:%s] %s", self.instance_name, self.stream, line)

        if self.stream == "stderr" and not self.hint_shown:
            hint = stderr_hint(line)
            if hint is not None:
                self.hint_shown = True
                console(self.events, self.instance_name, hint, "stderr")

        console(self.events, self.instance_name, line, self.stream)

    def drain(self, lines: Iterable[str]):
        for line in lines:
            self.forward(line)


def start_reader(pipe: IO[str], forwarder: OutputForwarder) -> threading.Thread:
    """Drain ``pipe`` on a daemon thread until EOF."""
    def run():
        try:
            forwarder.drain(pipe)
        except (OSError, ValueError) as e:
            logger.debug("Reader for %s %s stopped: %s",
                         forwarder.instance_name, forwarder.stream, e)
        finally:
            pipe.close()

    thread = threading.Thread(
        target=run, name=f"{forwarder.instance_name}-{forwarder.stream}", daemon=True
    )
    thread.start()
    return thread


def start_exit_watcher(name: str, process: subprocess.Popen, registry: ProcessRegistry,
                       events: Optional[EventSink],
                       on_exit: Optional[Callable[[int], None]] = None) -> threading.Thread:
    def run():
        exit_code = process.wait()
        registry.unregister(name, process)
        if on_exit is not None:
            on_exit(exit_code)
        logger.info("Instance %s exited with code %s", name, exit_code)
        emit(events, InstanceExitedEvent(instanceName=name, exitCode=exit_code))

    thread = threading.Thread(target=run, name=f"{name}-exit", daemon=True)
    thread.start()
    return thread

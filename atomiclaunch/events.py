"""Notifications sent to the external event sink.

The sink is fire-and-forget: the pipeline never waits on it, and a sink
that raises only costs a log line.
"""

import logging
from typing import Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ProgressEvent(BaseModel):
    kind: Literal["progress"] = "progress"
    instanceName: Optional[str] = None
    stage: str
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class ConsoleEvent(BaseModel):
    kind: Literal["console"] = "console"
    instanceName: str
    message: str
    stream: Literal["stdout", "stderr"]


class InstanceExitedEvent(BaseModel):
    kind: Literal["exited"] = "exited"
    instanceName: str
    exitCode: Optional[int] = None


LauncherEvent = Union[ProgressEvent, ConsoleEvent, InstanceExitedEvent]
EventSink = Callable[[LauncherEvent], None]


def emit(sink: Optional[EventSink], event: LauncherEvent):
    """Hand ``event`` to ``sink`` without letting the sink break the pipeline."""
    if sink is None:
        return
    try:
        sink(event)
    except Exception:
        logger.warning("Event sink rejected %s event", event.kind, exc_info=True)


def progress(sink: Optional[EventSink], instance_name: Optional[str], stage: str,
             percent: Optional[int] = None):
    emit(sink, ProgressEvent(instanceName=instance_name, stage=stage, progress=percent))


def console(sink: Optional[EventSink], instance_name: str, message: str,
            stream: str = "stderr"):
    emit(sink, ConsoleEvent(instanceName=instance_name, message=message, stream=stream))


class LoggingEventSink:
    """Sink that writes every event to the ``atomiclaunch.events`` logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def __call__(self, event: LauncherEvent):
        if isinstance(event, ProgressEvent):
            pct = f" ({event.progress}%)" if event.progress is not None else ""
            self.log.info("[%s] %s%s", event.instanceName or "-", event.stage, pct)
        elif isinstance(event, ConsoleEvent):
            self.log.info("[%s:%s] %s", event.instanceName, event.stream, event.message)
        else:
            self.log.info("[%s] exited with code %s", event.instanceName, event.exitCode)

"""Launching and provisioning of instances."""

from .game_launcher import GameLauncher, LaunchAttempt, LaunchPlan, LaunchState
from .natives import NativeStager
from .process import ProcessRegistry
from .provisioner import InstanceProvisioner

__all__ = [
    "GameLauncher",
    "InstanceProvisioner",
    "LaunchAttempt",
    "LaunchPlan",
    "LaunchState",
    "NativeStager",
    "ProcessRegistry",
]

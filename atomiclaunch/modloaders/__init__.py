"""Mod loader support: Fabric, NeoForge and profile merging."""

from .fabric import FabricInstaller
from .merger import LibraryEntry, MergedLaunchProfile, ProfileMerger, merge_loader_profile
from .models import LoaderKind, LoaderProfile, NeoForgeVersion
from .neoforge import NeoForgeInstaller

__all__ = [
    "FabricInstaller",
    "LibraryEntry",
    "LoaderKind",
    "LoaderProfile",
    "MergedLaunchProfile",
    "NeoForgeInstaller",
    "NeoForgeVersion",
    "ProfileMerger",
    "merge_loader_profile",
]

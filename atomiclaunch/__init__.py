"""Atomic Launcher: install and launch Minecraft instances."""

__version__ = "0.3.0"

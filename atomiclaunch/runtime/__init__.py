"""Java runtime module."""

from .java_manager import JavaManager

__all__ = ["JavaManager"]

"""Instance records."""

from .manager import InstanceManager
from .models import Instance

__all__ = ["Instance", "InstanceManager"]

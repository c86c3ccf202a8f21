"""Common utilities."""

from .async_http import AsyncHTTPClient
from .cancellation import CancellationToken
from .logger import setup_logging
from .platform import Platform
from .validation import sanitize_instance_name, validate_version

__all__ = [
    "AsyncHTTPClient",
    "CancellationToken",
    "Platform",
    "sanitize_instance_name",
    "setup_logging",
    "validate_version",
]

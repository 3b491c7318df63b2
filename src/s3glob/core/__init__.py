"""Core utilities and shared components for s3glob."""

from .config import settings
from .exceptions import FormatError, S3GlobError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "FormatError",
    "S3GlobError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]

"""Core utilities and shared components for s3-tools."""

from .config import settings
from .exceptions import S3ToolsError, ValidationError
from .observability import get_logger, get_tracer

__all__ = ["settings", "S3ToolsError", "ValidationError", "get_logger", "get_tracer"]

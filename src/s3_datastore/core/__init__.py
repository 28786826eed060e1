"""Core utilities and shared components for s3-datastore."""

from .config import settings
from .exceptions import DatastoreError, ValidationError
from .observability import get_logger, get_tracer

__all__ = ["settings", "DatastoreError", "ValidationError", "get_logger", "get_tracer"]

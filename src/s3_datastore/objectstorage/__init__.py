"""Object storage access for S3-compatible services."""

from .clients import BucketClient, ObjectStorageClient, S3ClientConfig, S3ClientManager
from .errors import error_code, is_no_such_bucket, is_not_found

__all__ = [
    "BucketClient",
    "ObjectStorageClient",
    "S3ClientConfig",
    "S3ClientManager",
    "error_code",
    "is_no_such_bucket",
    "is_not_found",
]

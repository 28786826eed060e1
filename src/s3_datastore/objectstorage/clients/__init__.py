"""S3 client management and configuration."""

from .bucket_client import BucketClient, ObjectStorageClient
from .s3_client import S3ClientConfig, S3ClientManager

__all__ = ["BucketClient", "ObjectStorageClient", "S3ClientConfig", "S3ClientManager"]

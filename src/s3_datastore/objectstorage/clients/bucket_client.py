"""Bucket-bound object storage client.

The datastore never talks to boto3 directly. It goes through the small
capability set described by ``ObjectStorageClient``, which ``BucketClient``
implements on top of a boto3 S3 client and a single bucket name.
"""

from typing import Any, Optional, Protocol

from s3_datastore.core import get_logger

logger = get_logger(__name__)


class ObjectStorageClient(Protocol):
    """Operations the datastore needs from an object store."""

    bucket: str

    def upload(self, key: str, body: bytes) -> dict[str, Any]:
        """Store ``body`` under ``key``, replacing any existing object."""
        ...

    def get_object(self, key: str) -> dict[str, Any]:
        """Return the object response for ``key``, ``Body`` included."""
        ...

    def head_object(self, key: str) -> dict[str, Any]:
        """Return object metadata for ``key`` without the body."""
        ...

    def delete_object(self, key: str) -> dict[str, Any]:
        """Remove the object stored under ``key``."""
        ...

    def list_objects_v2(
        self,
        prefix: str,
        start_after: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> dict[str, Any]:
        """Return one listing page of objects under ``prefix``."""
        ...

    def create_bucket(self) -> dict[str, Any]:
        """Create the bucket this client is bound to."""
        ...


class BucketClient:
    """An ``ObjectStorageClient`` over a boto3 S3 client."""

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload(self, key: str, body: bytes) -> dict[str, Any]:
        return self.client.put_object(Bucket=self.bucket, Key=key, Body=body)

    def get_object(self, key: str) -> dict[str, Any]:
        return self.client.get_object(Bucket=self.bucket, Key=key)

    def head_object(self, key: str) -> dict[str, Any]:
        return self.client.head_object(Bucket=self.bucket, Key=key)

    def delete_object(self, key: str) -> dict[str, Any]:
        return self.client.delete_object(Bucket=self.bucket, Key=key)

    def list_objects_v2(
        self,
        prefix: str,
        start_after: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        elif start_after:
            params["StartAfter"] = start_after
        if max_keys is not None:
            params["MaxKeys"] = max_keys
        return self.client.list_objects_v2(**params)

    def create_bucket(self) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": self.bucket}

        # us-east-1 rejects an explicit LocationConstraint
        region = self.client.meta.region_name
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        logger.info("Creating bucket", bucket=self.bucket, region=region)
        return self.client.create_bucket(**params)

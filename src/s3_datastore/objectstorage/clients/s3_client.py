"""Connection settings for the bucket a datastore lives in.

``S3ClientConfig`` holds the connection options and ``S3ClientManager``
turns them into a boto3 client, then into bucket-bound ``BucketClient``
instances the datastore talks to. Datastore locations are written as
``s3://bucket/namespace`` and split with ``S3ClientManager.parse_s3_path``.

Credentials are resolved in this order:
    1. A named AWS CLI profile (aws_profile)
    2. An explicit key pair, with an optional session token
    3. The default boto3 credential chain (environment, IAM role)

Setting endpoint_url points the client at an S3-compatible service such as
MinIO instead of AWS.
"""

from typing import Any, Optional
from urllib.parse import urlparse

import boto3
from pydantic import BaseModel, ConfigDict, Field

from s3_datastore.core import get_logger
from s3_datastore.core.exceptions import ValidationError

from .bucket_client import BucketClient

logger = get_logger(__name__)

S3_SCHEME = "s3://"


class S3ClientConfig(BaseModel):
    """Connection options for the datastore's bucket.

    Example:
        # Local MinIO holding the block store
        config = S3ClientConfig(
            bucket="ipfs-blocks",
            endpoint_url="http://localhost:9000",
            access_key_id="minioadmin",
            secret_access_key="minioadmin",
        )
    """

    model_config = ConfigDict(extra="forbid")

    bucket: Optional[str] = Field(None, description="Bucket the datastore lives in")
    access_key_id: Optional[str] = Field(None, description="AWS access key ID")
    secret_access_key: Optional[str] = Field(None, description="AWS secret access key")
    session_token: Optional[str] = Field(
        None, description="Session token for temporary credentials"
    )
    region_name: str = Field("us-east-1", description="Region of the bucket")
    endpoint_url: Optional[str] = Field(
        None, description="Endpoint of an S3-compatible service"
    )
    aws_profile: Optional[str] = Field(None, description="AWS CLI profile name")

    def credential_kwargs(self) -> dict[str, Any]:
        """Return the explicit credential arguments for ``boto3.client``."""
        if not (self.access_key_id and self.secret_access_key):
            return {}

        credentials = {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
        }
        if self.session_token:
            credentials["aws_session_token"] = self.session_token
        return credentials


class S3ClientManager:
    """Creates the boto3 client once and hands out bucket-bound clients."""

    def __init__(self, config: S3ClientConfig):
        self.config = config
        self._client = None
        logger.debug(
            "S3 client manager initialized",
            bucket=config.bucket,
            region=config.region_name,
        )

    @property
    def client(self):
        """The shared boto3 S3 client, created on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        kwargs: dict[str, Any] = {"region_name": self.config.region_name}
        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.aws_profile:
            session = boto3.Session(profile_name=self.config.aws_profile)
            logger.info("Using AWS profile", profile=self.config.aws_profile)
            return session.client("s3", **kwargs)

        credentials = self.config.credential_kwargs()
        logger.info(
            "Using S3 credentials",
            source="explicit" if credentials else "default chain",
            endpoint=self.config.endpoint_url,
        )
        return boto3.client("s3", **kwargs, **credentials)

    def bucket_client(self, bucket: Optional[str] = None) -> BucketClient:
        """Return a client bound to ``bucket`` (defaults to the configured one).

        Raises:
            ValidationError: If no bucket is given or configured
        """
        bucket = bucket or self.config.bucket
        if not bucket:
            raise ValidationError(
                "A bucket must be configured for the datastore client"
            )
        return BucketClient(self.client, bucket)

    @staticmethod
    def parse_s3_path(s3_path: str) -> tuple[str, str]:
        """Split ``s3://bucket/namespace`` into bucket and namespace.

        The namespace is "" when the path names only a bucket.

        Raises:
            ValidationError: If the path is not an s3:// URL naming a bucket
        """
        if not s3_path.startswith(S3_SCHEME):
            raise ValidationError(f"S3 path must start with '{S3_SCHEME}': {s3_path}")

        parsed = urlparse(s3_path)
        if not parsed.netloc:
            raise ValidationError(f"Invalid S3 path, missing bucket: {s3_path}")

        return parsed.netloc, parsed.path.lstrip("/")

"""Test configuration and fixtures for s3-datastore."""

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from s3_datastore.datastore import S3Datastore
from s3_datastore.objectstorage.clients import BucketClient

BUCKET = "test-bucket"
NAMESPACE = ".ipfs/datastore"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Keep boto3 away from any real credentials."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3(aws_credentials):
    """A mocked S3 client with an empty test bucket."""
    with mock_aws():
        client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def bucket_client(s3):
    """A bucket-bound client over the mocked S3."""
    return BucketClient(s3, BUCKET)


@pytest.fixture
def store(bucket_client):
    """A datastore in the mocked test bucket."""
    return S3Datastore(NAMESPACE, bucket_client)


@pytest.fixture
def client_error():
    """Factory for botocore client errors."""

    def make(code: str, status: int = 400, operation: str = "PutObject"):
        return ClientError(
            {
                "Error": {"Code": code, "Message": f"{code} raised in test"},
                "ResponseMetadata": {"HTTPStatusCode": status},
            },
            operation,
        )

    return make

"""Tests for single-key S3 datastore operations."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from s3_datastore.core.exceptions import (
    DatastoreError,
    DeleteFailedError,
    NotFoundError,
    OpenFailedError,
    ValidationError,
    WriteFailedError,
)
from s3_datastore.datastore import S3Datastore
from s3_datastore.key import Key
from s3_datastore.objectstorage.clients import BucketClient, S3ClientConfig

BUCKET = "test-bucket"
NAMESPACE = ".ipfs/datastore"


def _mock_client():
    client = MagicMock()
    client.bucket = BUCKET
    return client


class TestConstruction:
    """Test constructor validation."""

    def test_client_without_bucket(self, s3):
        """Test a client must name a bucket."""
        with pytest.raises(ValidationError, match="predefined bucket"):
            S3Datastore(NAMESPACE, BucketClient(s3, ""))

    def test_client_without_bucket_attribute(self):
        """Test an object without a bucket attribute is rejected."""
        with pytest.raises(ValidationError, match="predefined bucket"):
            S3Datastore(NAMESPACE, object())

    @pytest.mark.parametrize("flag", ["yes", 1, None])
    def test_create_if_missing_must_be_bool(self, bucket_client, flag):
        """Test create_if_missing only accepts real booleans."""
        with pytest.raises(ValidationError, match="create_if_missing"):
            S3Datastore(NAMESPACE, bucket_client, create_if_missing=flag)

    def test_empty_namespace(self, bucket_client):
        """Test the namespace cannot be the bucket root."""
        with pytest.raises(ValidationError):
            S3Datastore("/", bucket_client)

    def test_attributes(self, bucket_client):
        """Test the datastore exposes its identity."""
        store = S3Datastore("/" + NAMESPACE, bucket_client, create_if_missing=True)
        assert store.bucket == BUCKET
        assert store.path == "/" + NAMESPACE
        assert store.mapper.namespace == NAMESPACE
        assert store.create_if_missing is True

    def test_from_s3_path(self, s3):
        """Test creating a datastore from an s3:// path."""
        config = S3ClientConfig(
            access_key_id="test_key",
            secret_access_key="test_secret",
            region_name="us-east-1",
        )
        store = S3Datastore.from_s3_path(f"s3://{BUCKET}/blocks", config)

        store.put(Key("/a"), b"1")

        assert store.bucket == BUCKET
        assert s3.get_object(Bucket=BUCKET, Key="blocks/a")["Body"].read() == b"1"

    def test_from_s3_path_without_namespace(self):
        """Test a bare bucket path is rejected."""
        with pytest.raises(ValidationError):
            S3Datastore.from_s3_path(f"s3://{BUCKET}")


class TestPutGetHasDelete:
    """Test CRUD operations against mocked S3."""

    def test_put_then_get(self, store):
        """Test a stored value reads back unchanged."""
        store.put(Key("/a/b"), b"hello")
        assert store.get(Key("/a/b")) == b"hello"

    def test_put_overwrites(self, store):
        """Test a second put replaces the value."""
        store.put(Key("/a"), b"one")
        store.put(Key("/a"), b"two")
        assert store.get(Key("/a")) == b"two"

    def test_binary_payload(self, store):
        """Test payloads pass through as opaque bytes."""
        payload = bytes(range(256)) * 4
        store.put(Key("/blob"), payload)
        assert store.get(Key("/blob")) == payload

    def test_empty_payload(self, store):
        """Test an empty value is stored and read back."""
        store.put(Key("/empty"), b"")
        assert store.get(Key("/empty")) == b""

    def test_object_key_layout(self, store, s3):
        """Test keys land under the namespace in the bucket."""
        store.put(Key("/a/b"), b"hello")
        obj = s3.get_object(Bucket=BUCKET, Key=".ipfs/datastore/a/b")
        assert obj["Body"].read() == b"hello"

    def test_get_missing(self, store):
        """Test reading a missing key raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            store.get(Key("/missing"))
        assert isinstance(exc_info.value.__cause__, ClientError)

    def test_has(self, store):
        """Test existence checks."""
        assert store.has(Key("/a")) is False
        store.put(Key("/a"), b"1")
        assert store.has(Key("/a")) is True

    def test_delete(self, store):
        """Test deleted keys are gone."""
        store.put(Key("/a"), b"1")
        store.delete(Key("/a"))

        assert store.has(Key("/a")) is False
        with pytest.raises(NotFoundError):
            store.get(Key("/a"))

    def test_delete_missing_key(self, store):
        """Test deleting a key that was never written is not an error."""
        store.delete(Key("/never-written"))

    def test_bulk_helpers(self, store):
        """Test put_many, get_many and delete_many."""
        pairs = [(Key("/a"), b"1"), (Key("/b"), b"2")]

        assert list(store.put_many(pairs)) == pairs
        assert list(store.get_many([Key("/b"), Key("/a")])) == [b"2", b"1"]
        assert list(store.delete_many([Key("/a")])) == [Key("/a")]
        assert store.has(Key("/a")) is False
        assert store.has(Key("/b")) is True


class TestMissingBucket:
    """Test behaviour when the bucket does not exist."""

    def test_put_without_create(self, s3):
        """Test writes fail with the backend error chained."""
        store = S3Datastore(NAMESPACE, BucketClient(s3, "no-such-bucket"))

        with pytest.raises(WriteFailedError) as exc_info:
            store.put(Key("/a"), b"1")

        cause = exc_info.value.__cause__
        assert isinstance(cause, ClientError)
        assert cause.response["Error"]["Code"] == "NoSuchBucket"

    def test_put_creates_bucket(self, s3):
        """Test create_if_missing creates the bucket and retries."""
        store = S3Datastore(
            NAMESPACE, BucketClient(s3, "lazy-bucket"), create_if_missing=True
        )

        store.put(Key("/a"), b"1")

        assert store.get(Key("/a")) == b"1"
        names = [b["Name"] for b in s3.list_buckets()["Buckets"]]
        assert "lazy-bucket" in names

    def test_bucket_creation_retry_is_bounded(self, client_error):
        """Test a bucket that never appears does not retry forever."""
        client = _mock_client()
        client.upload.side_effect = client_error("NoSuchBucket", 404)
        store = S3Datastore(NAMESPACE, client, create_if_missing=True)

        with pytest.raises(WriteFailedError):
            store.put(Key("/a"), b"1")

        client.create_bucket.assert_called_once_with()
        assert client.upload.call_count == 2

    def test_bucket_creation_race(self, client_error):
        """Test losing the bucket creation race still retries the write."""
        client = _mock_client()
        client.upload.side_effect = [client_error("NoSuchBucket", 404), {}]
        client.create_bucket.side_effect = client_error("BucketAlreadyOwnedByYou", 409)
        store = S3Datastore(NAMESPACE, client, create_if_missing=True)

        store.put(Key("/a"), b"1")

        assert client.upload.call_count == 2

    def test_bucket_creation_failure(self, client_error):
        """Test a failed bucket creation is a write failure."""
        client = _mock_client()
        client.upload.side_effect = client_error("NoSuchBucket", 404)
        client.create_bucket.side_effect = client_error("AccessDenied", 403)
        store = S3Datastore(NAMESPACE, client, create_if_missing=True)

        with pytest.raises(WriteFailedError, match="create bucket"):
            store.put(Key("/a"), b"1")

    def test_delete_fails(self, s3):
        """Test delete failures are wrapped."""
        store = S3Datastore(NAMESPACE, BucketClient(s3, "no-such-bucket"))
        with pytest.raises(DeleteFailedError) as exc_info:
            store.delete(Key("/a"))
        assert isinstance(exc_info.value.__cause__, ClientError)


class TestPassthroughErrors:
    """Test failures that propagate as the original backend error."""

    def test_get_non_404(self, client_error):
        """Test get passes non-404 failures through unwrapped."""
        client = _mock_client()
        client.get_object.side_effect = client_error("AccessDenied", 403, "GetObject")
        store = S3Datastore(NAMESPACE, client)

        with pytest.raises(ClientError) as exc_info:
            store.get(Key("/a"))
        assert not isinstance(exc_info.value, DatastoreError)

    def test_has_non_404(self, client_error):
        """Test has passes non-404 failures through unwrapped."""
        client = _mock_client()
        client.head_object.side_effect = client_error("AccessDenied", 403, "HeadObject")
        store = S3Datastore(NAMESPACE, client)

        with pytest.raises(ClientError):
            store.has(Key("/a"))

    def test_get_body_shapes(self):
        """Test response bodies are normalized to bytes."""
        client = _mock_client()
        store = S3Datastore(NAMESPACE, client)

        client.get_object.return_value = {"Body": bytearray(b"raw")}
        assert store.get(Key("/a")) == b"raw"

        client.get_object.return_value = {}
        assert store.get(Key("/a")) is None


class TestOpen:
    """Test opening the datastore."""

    def test_open_creates_root_marker(self, store, s3):
        """Test open writes an empty marker at the namespace root."""
        store.open()

        obj = s3.get_object(Bucket=BUCKET, Key=NAMESPACE)
        assert obj["Body"].read() == b""

    def test_open_existing_store_does_not_write(self, store, bucket_client):
        """Test open on an initialized store only probes."""
        store.open()

        spy = MagicMock(wraps=bucket_client)
        spy.bucket = BUCKET
        reopened = S3Datastore(NAMESPACE, spy)
        reopened.open()

        spy.head_object.assert_called_once_with(NAMESPACE)
        spy.upload.assert_not_called()

    def test_open_missing_bucket_with_create(self, s3):
        """Test open creates a missing bucket when allowed."""
        store = S3Datastore(
            NAMESPACE, BucketClient(s3, "fresh-bucket"), create_if_missing=True
        )

        store.open()

        assert s3.head_object(Bucket="fresh-bucket", Key=NAMESPACE)

    def test_open_missing_bucket_without_create(self, s3):
        """Test open cannot initialize a missing bucket on its own."""
        store = S3Datastore(NAMESPACE, BucketClient(s3, "no-such-bucket"))
        with pytest.raises(WriteFailedError):
            store.open()

    def test_open_probe_failure(self, client_error):
        """Test non-404 probe failures are open failures."""
        client = _mock_client()
        client.head_object.side_effect = client_error("AccessDenied", 403, "HeadObject")
        store = S3Datastore(NAMESPACE, client)

        with pytest.raises(OpenFailedError) as exc_info:
            store.open()

        assert isinstance(exc_info.value.__cause__, ClientError)
        client.upload.assert_not_called()

    def test_context_manager(self, store, s3):
        """Test the datastore opens on enter."""
        with store as opened:
            assert opened is store
            opened.put(Key("/a"), b"1")

        assert s3.head_object(Bucket=BUCKET, Key=NAMESPACE)

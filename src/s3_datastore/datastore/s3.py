"""A datastore backed by an S3 bucket.

Every key is stored as one object under the datastore's namespace path (see
``KeyMapper``). Values are passed through unmodified.

Error shapes:
    - ``get`` raises ``NotFoundError`` for missing keys; other failures
      propagate as the original ``botocore`` ``ClientError``.
    - ``has`` returns False for missing keys; other failures propagate as
      the original ``ClientError``.
    - ``put``, ``delete`` and ``open`` wrap failures in ``WriteFailedError``,
      ``DeleteFailedError`` and ``OpenFailedError``.
    - Listing failures during a query raise ``ListingError``.
"""

from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic import ValidationError as PydanticValidationError

from s3_datastore.core import get_logger, get_tracer, settings
from s3_datastore.core.exceptions import (
    DeleteFailedError,
    NotFoundError,
    OpenFailedError,
    ValidationError,
    WriteFailedError,
)
from s3_datastore.key import PATH_SEP, Key
from s3_datastore.objectstorage.clients import S3ClientConfig, S3ClientManager
from s3_datastore.objectstorage.errors import (
    error_code,
    is_no_such_bucket,
    is_not_found,
)

from .batch import S3Batch
from .interface import Datastore
from .listing import KeyListing
from .mapping import KeyMapper
from .query import Query, QueryEntry, fetch_entries, filter_prefix

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class S3DatastoreOptions(BaseModel):
    """Validated construction options for ``S3Datastore``."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(..., description="Namespace path inside the bucket")
    client: Any = Field(..., description="ObjectStorageClient bound to a bucket")
    create_if_missing: StrictBool = Field(
        False, description="Create the bucket on the first write if it is missing"
    )

    @field_validator("client")
    @classmethod
    def client_has_bucket(cls, client: Any) -> Any:
        bucket = getattr(client, "bucket", None)
        if not isinstance(bucket, str) or not bucket:
            raise ValueError(
                "An object storage client with a predefined bucket must be supplied"
            )
        return client


class S3Datastore(Datastore):
    """Datastore storing each key as an object in an S3 bucket.

    Example:
        manager = S3ClientManager(S3ClientConfig(bucket="blocks"))
        store = S3Datastore(".ipfs/datastore", manager.bucket_client())
        with store:
            store.put(Key("/hello"), b"world")
            assert store.get(Key("/hello")) == b"world"
    """

    def __init__(self, path: str, client: Any, create_if_missing: bool = False):
        """Initialize the datastore.

        Args:
            path: Namespace path all keys are stored under
            client: Object storage client bound to the bucket
            create_if_missing: Create the bucket when a write finds it missing

        Raises:
            ValidationError: If the client has no bucket, ``create_if_missing``
                is not a boolean, or ``path`` is empty
        """
        try:
            options = S3DatastoreOptions(
                path=path, client=client, create_if_missing=create_if_missing
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid datastore options: {e}") from e

        self.path = options.path
        self.client = options.client
        self.bucket: str = options.client.bucket
        self.create_if_missing = options.create_if_missing
        self.mapper = KeyMapper(options.path)

        logger.info(
            "S3 datastore initialized",
            bucket=self.bucket,
            namespace=self.mapper.namespace,
            create_if_missing=self.create_if_missing,
        )

    @classmethod
    def from_s3_path(
        cls,
        s3_path: str,
        config: Optional[S3ClientConfig] = None,
        create_if_missing: bool = False,
    ) -> "S3Datastore":
        """Create a datastore for ``s3://bucket/namespace``.

        Raises:
            ValidationError: If the path is malformed or names no namespace
        """
        bucket, namespace = S3ClientManager.parse_s3_path(s3_path)
        manager = S3ClientManager(config or S3ClientConfig())
        return cls(namespace, manager.bucket_client(bucket), create_if_missing)

    def _object_key(self, key: Key) -> str:
        return self.mapper.to_object_key(key)

    def put(self, key: Key, value: bytes) -> None:
        """Store ``value`` under ``key``.

        A missing bucket is created and the write retried when
        ``create_if_missing`` is set, at most
        ``settings.create_bucket_attempts`` times.

        Raises:
            WriteFailedError: If the write fails
        """
        object_key = self._object_key(key)
        attempts_left = (
            settings.create_bucket_attempts if self.create_if_missing else 0
        )

        while True:
            try:
                self.client.upload(object_key, value)
                return
            except Exception as e:
                if is_no_such_bucket(e) and attempts_left > 0:
                    attempts_left -= 1
                    logger.warning("Bucket missing, creating it", bucket=self.bucket)
                    self._create_bucket()
                    continue

                logger.error(
                    "Failed to write key",
                    key=str(key),
                    object_key=object_key,
                    code=error_code(e),
                )
                raise WriteFailedError(f"Failed to write key '{key}': {e}") from e

    def _create_bucket(self) -> None:
        try:
            self.client.create_bucket()
        except Exception as e:
            # Another writer may have won the race to create it
            if error_code(e) in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                logger.debug("Bucket already exists", bucket=self.bucket)
                return
            raise WriteFailedError(
                f"Failed to create bucket '{self.bucket}': {e}"
            ) from e

    def get(self, key: Key) -> Optional[bytes]:
        """Return the value stored under ``key`` (None for an empty response).

        Raises:
            NotFoundError: If nothing is stored under ``key``
            botocore.exceptions.ClientError: On any other backend failure
        """
        try:
            data = self.client.get_object(self._object_key(key))
        except Exception as e:
            if is_not_found(e):
                raise NotFoundError(f"No value stored under key '{key}'") from e
            raise

        body = data.get("Body")
        if body is None:
            return None
        if hasattr(body, "read"):
            return bytes(body.read())
        return bytes(body)

    def has(self, key: Key) -> bool:
        """Return True when a value is stored under ``key``.

        Raises:
            botocore.exceptions.ClientError: On any failure but not-found
        """
        try:
            self.client.head_object(self._object_key(key))
            return True
        except Exception as e:
            if is_not_found(e):
                return False
            raise

    def delete(self, key: Key) -> None:
        """Remove the value stored under ``key``.

        Raises:
            DeleteFailedError: If the delete fails
        """
        object_key = self._object_key(key)
        try:
            self.client.delete_object(object_key)
        except Exception as e:
            logger.error(
                "Failed to delete key",
                key=str(key),
                object_key=object_key,
                code=error_code(e),
            )
            raise DeleteFailedError(f"Failed to delete key '{key}': {e}") from e

    def batch(self) -> S3Batch:
        return S3Batch(self)

    def _all(self, query: Query) -> Iterator[QueryEntry]:
        key_prefix = query.prefix
        if key_prefix is not None and not key_prefix.startswith(PATH_SEP):
            key_prefix = PATH_SEP + key_prefix

        listing = KeyListing(
            self.client,
            self.mapper,
            self.mapper.to_object_prefix(key_prefix or ""),
            page_size=settings.list_page_size,
        )
        keys = filter_prefix(listing, key_prefix)
        return fetch_entries(keys, self.get, keys_only=query.keys_only)

    def query(self, query: Query) -> Iterator[QueryEntry]:
        """Run ``query`` lazily over the keys of this datastore.

        Raises:
            ListingError: While iterating, if a listing request fails
        """
        logger.debug(
            "Querying datastore", prefix=query.prefix, keys_only=query.keys_only
        )
        return super().query(query)

    def open(self) -> None:
        """Check the bucket is reachable, initializing the namespace if needed.

        A missing namespace root marker is written as an empty object.

        Raises:
            OpenFailedError: If the bucket cannot be reached
            WriteFailedError: If writing the root marker fails
        """
        root = self.mapper.root_object_key()
        with tracer.start_as_current_span("s3_datastore.open") as span:
            span.set_attribute("s3.bucket", self.bucket)
            span.set_attribute("s3.key", root)
            try:
                self.client.head_object(root)
            except Exception as e:
                if is_not_found(e):
                    logger.info(
                        "Initializing datastore namespace",
                        bucket=self.bucket,
                        namespace=self.mapper.namespace,
                    )
                    self.put(Key(PATH_SEP), b"")
                    return

                logger.error(
                    "Failed to open datastore", bucket=self.bucket, code=error_code(e)
                )
                raise OpenFailedError(
                    f"Failed to open datastore in bucket '{self.bucket}': {e}"
                ) from e

        logger.debug("Datastore opened", bucket=self.bucket)

    def close(self) -> None:
        pass

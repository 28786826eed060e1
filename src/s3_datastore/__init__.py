"""A key-value datastore backed by an S3-compatible bucket.

Datastore keys are hierarchical paths (``/blocks/CIQ...``). Each key is
stored as one object under a fixed namespace path inside the bucket, so a
block store or any other content-addressing layer can treat the bucket as a
local key-value store.

Key Features:
    - get/put/has/delete over single objects
    - Lazy, paginated queries with prefix and keys-only modes
    - Best-effort concurrent batches
    - Optional bucket creation on first write

Recommended Usage:

    >>> from s3_datastore import Key, S3ClientConfig, S3Datastore
    >>> store = S3Datastore.from_s3_path(
    ...     "s3://my-bucket/.ipfs/datastore",
    ...     S3ClientConfig(aws_profile="ipfs"),
    ...     create_if_missing=True,
    ... )
    >>> store.open()
    >>> store.put(Key("/hello"), b"world")
"""

__version__ = "0.1.0"

from .core.exceptions import (
    BatchCommittedError,
    DatastoreError,
    DeleteFailedError,
    ListingError,
    NotFoundError,
    OpenFailedError,
    ValidationError,
    WriteFailedError,
)
from .datastore import (
    Batch,
    Datastore,
    KeyListing,
    KeyMapper,
    Query,
    QueryEntry,
    S3Batch,
    S3Datastore,
)
from .key import Key
from .objectstorage import (
    BucketClient,
    ObjectStorageClient,
    S3ClientConfig,
    S3ClientManager,
)

__all__ = [
    # Keys
    "Key",
    # Datastore
    "Batch",
    "Datastore",
    "KeyListing",
    "KeyMapper",
    "Query",
    "QueryEntry",
    "S3Batch",
    "S3Datastore",
    # Object storage
    "BucketClient",
    "ObjectStorageClient",
    "S3ClientConfig",
    "S3ClientManager",
    # Errors
    "BatchCommittedError",
    "DatastoreError",
    "DeleteFailedError",
    "ListingError",
    "NotFoundError",
    "OpenFailedError",
    "ValidationError",
    "WriteFailedError",
]

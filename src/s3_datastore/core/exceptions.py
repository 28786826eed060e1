"""Exception hierarchy for s3-datastore."""

from typing import Optional


class DatastoreError(Exception):
    """Base exception for all s3-datastore errors."""

    pass


class ValidationError(DatastoreError):
    """Raised when validation fails."""

    pass


class NotFoundError(DatastoreError):
    """Raised when a requested key has no stored object."""

    pass


class WriteFailedError(DatastoreError):
    """Raised when storing a value fails."""

    pass


class DeleteFailedError(DatastoreError):
    """Raised when removing a value fails."""

    pass


class OpenFailedError(DatastoreError):
    """Raised when the bucket cannot be reached on open."""

    pass


class ListingError(DatastoreError):
    """Raised when a bucket listing request fails.

    The backend error code is kept on ``code``; the original exception is
    chained as ``__cause__``.
    """

    def __init__(self, code: Optional[str], message: Optional[str] = None):
        self.code = code
        super().__init__(message or f"Listing failed: {code}")


class BatchCommittedError(DatastoreError):
    """Raised when a batch is reused after commit."""

    pass

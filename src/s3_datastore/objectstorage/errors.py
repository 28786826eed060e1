"""Classification of object storage client errors.

boto3 reports every service failure as ``botocore.exceptions.ClientError``;
the interesting conditions are told apart by error code and HTTP status.
"""

from typing import Optional

from botocore.exceptions import ClientError

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
NO_SUCH_BUCKET = "NoSuchBucket"


def error_code(error: BaseException) -> Optional[str]:
    """Return the backend error code of ``error``, if it carries one."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return getattr(error, "code", None)


def status_code(error: BaseException) -> Optional[int]:
    """Return the HTTP status of ``error``, if it carries one."""
    if isinstance(error, ClientError):
        return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return None


def is_not_found(error: BaseException) -> bool:
    """True when ``error`` says the object does not exist."""
    return status_code(error) == 404 or error_code(error) in NOT_FOUND_CODES


def is_no_such_bucket(error: BaseException) -> bool:
    """True when ``error`` says the bucket does not exist."""
    return error_code(error) == NO_SUCH_BUCKET

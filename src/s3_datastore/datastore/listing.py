"""Paginated key listing over ``list_objects_v2``."""

from typing import Any, Optional

from s3_datastore.core import get_logger
from s3_datastore.core.exceptions import ListingError
from s3_datastore.key import Key
from s3_datastore.objectstorage.clients import ObjectStorageClient
from s3_datastore.objectstorage.errors import error_code

from .mapping import KeyMapper

logger = get_logger(__name__)


class KeyListing:
    """Iterator over every key stored under an object prefix.

    Pages are fetched one at a time, only once the previous page has been
    consumed. The continuation state is the server's continuation token when
    it sends one, otherwise the last object key of the previous page.

    A listing is single pass: iterating again after exhaustion yields
    nothing. Start a new listing to list again.

    Example:
        listing = KeyListing(client, mapper, mapper.to_object_prefix("/blocks"))
        for key in listing:
            print(key)
    """

    def __init__(
        self,
        client: ObjectStorageClient,
        mapper: KeyMapper,
        prefix: str,
        page_size: Optional[int] = None,
    ):
        self.client = client
        self.mapper = mapper
        self.prefix = prefix
        self.page_size = page_size

        self._page: list[dict[str, Any]] = []
        self._cursor = 0
        self._start_after: Optional[str] = None
        self._continuation_token: Optional[str] = None
        self._has_more = True
        self._exhausted = False
        self.pages_fetched = 0

    def __iter__(self) -> "KeyListing":
        return self

    def __next__(self) -> Key:
        while self._cursor >= len(self._page):
            if self._exhausted:
                raise StopIteration
            if not self._has_more:
                self._exhausted = True
                raise StopIteration
            self._fetch_page()

        entry = self._page[self._cursor]
        self._cursor += 1
        return self.mapper.from_object_key(entry["Key"])

    def _fetch_page(self) -> None:
        try:
            data = self.client.list_objects_v2(
                prefix=self.prefix,
                start_after=self._start_after,
                continuation_token=self._continuation_token,
                max_keys=self.page_size,
            )
        except Exception as e:
            self._exhausted = True
            code = error_code(e)
            logger.error("Listing objects failed", prefix=self.prefix, code=code)
            raise ListingError(code) from e

        self.pages_fetched += 1
        self._page = data.get("Contents", [])
        self._cursor = 0
        self._has_more = bool(data.get("IsTruncated"))

        if not self._has_more:
            return

        token = data.get("NextContinuationToken")
        if token:
            self._continuation_token = token
        elif self._page:
            self._continuation_token = None
            self._start_after = self._page[-1]["Key"]
        else:
            # Truncated but nothing to resume from; stop rather than loop
            logger.warning(
                "Truncated listing page without entries or token", prefix=self.prefix
            )
            self._has_more = False

"""Query models and the lazy query pipeline.

A query runs in two stages. The backend stage (``filter_prefix`` and
``fetch_entries``) turns a stream of keys into entries, fetching values
unless the query is keys-only. The generic stage (``apply_query``) applies
filters, orders, offset and limit on top of any entry stream.
"""

from dataclasses import dataclass
from itertools import islice
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from s3_datastore.key import Key


@dataclass(frozen=True)
class QueryEntry:
    """One query result; ``value`` is None for keys-only queries."""

    key: Key
    value: Optional[bytes] = None


class Query(BaseModel):
    """Query options understood by every datastore.

    Example:
        # Every key below /blocks, without fetching values
        query = Query(prefix="/blocks", keys_only=True)

        # Ten largest values
        query = Query(orders=[lambda e: -len(e.value)], limit=10)
    """

    model_config = ConfigDict(frozen=True)

    prefix: Optional[str] = Field(None, description="Only keys starting with this")
    keys_only: bool = Field(False, description="Skip fetching values")
    filters: Sequence[Callable[[QueryEntry], bool]] = Field(
        default_factory=tuple, description="Predicates every entry must satisfy"
    )
    orders: Sequence[Callable[[QueryEntry], Any]] = Field(
        default_factory=tuple, description="Sort keys, most significant first"
    )
    offset: int = Field(0, ge=0, description="Entries to skip")
    limit: Optional[int] = Field(None, ge=0, description="Maximum entries to yield")


def filter_prefix(keys: Iterable[Key], prefix: Optional[str]) -> Iterator[Key]:
    """Yield the keys whose string form starts with ``prefix``.

    Listing prefixes match object keys byte-wise, which can leak keys from a
    sibling namespace when the prefix does not end on a segment boundary.
    """
    if prefix is None:
        yield from keys
        return

    for key in keys:
        if str(key).startswith(prefix):
            yield key


def fetch_entries(
    keys: Iterable[Key],
    get: Callable[[Key], Optional[bytes]],
    keys_only: bool = False,
) -> Iterator[QueryEntry]:
    """Turn keys into entries, fetching each value unless ``keys_only``.

    A failed fetch ends the stream with that error.
    """
    for key in keys:
        if keys_only:
            yield QueryEntry(key=key)
        else:
            yield QueryEntry(key=key, value=get(key))


def _sorted(entries: Iterable[QueryEntry], orders: Sequence[Callable]) -> list:
    # Stable sorts applied least significant first
    result = list(entries)
    for order in reversed(orders):
        result.sort(key=order)
    return result


def apply_query(entries: Iterable[QueryEntry], query: Query) -> Iterator[QueryEntry]:
    """Apply the filters, orders, offset and limit of ``query`` lazily.

    Ordering has to see every entry, so an ordered query drains the source
    before yielding anything.
    """
    it: Iterable[QueryEntry] = entries

    for predicate in query.filters:
        it = filter(predicate, it)

    if query.orders:
        it = _sorted(it, query.orders)

    stop = None if query.limit is None else query.offset + query.limit
    yield from islice(it, query.offset, stop)

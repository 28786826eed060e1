"""Mapping between datastore keys and object keys.

Every key of a datastore lives under a fixed namespace path inside the
bucket. Object keys are always relative (no leading ``/`` or ``./``), so
``Key("/a/b")`` under namespace ``/.ipfs/datastore`` is stored as
``.ipfs/datastore/a/b`` and the namespace root itself as ``.ipfs/datastore``.
"""

import posixpath

from s3_datastore.core.exceptions import ValidationError
from s3_datastore.key import PATH_SEP, Key


def relative_object_path(path: str) -> str:
    """Normalize ``path`` into a relative object key ("" for the bucket root)."""
    normalized = posixpath.normpath(PATH_SEP + path.lstrip(PATH_SEP))
    return normalized.lstrip(PATH_SEP)


class KeyMapper:
    """Translates keys to object keys under one namespace and back."""

    def __init__(self, path: str):
        namespace = relative_object_path(path)
        if not namespace:
            raise ValidationError(
                f"Namespace path must name at least one segment, got {path!r}"
            )
        self._path = path
        self._namespace = namespace

    @property
    def path(self) -> str:
        """The namespace path as given at construction."""
        return self._path

    @property
    def namespace(self) -> str:
        """The normalized namespace every object key starts with."""
        return self._namespace

    def to_object_key(self, key: Key) -> str:
        """Return the object key that stores ``key``."""
        return relative_object_path(f"{self._namespace}{PATH_SEP}{key}")

    def from_object_key(self, object_key: str) -> Key:
        """Recover the key stored under ``object_key``.

        Raises:
            ValueError: If ``object_key`` is outside this namespace
        """
        remainder = object_key[len(self._namespace):]
        if not object_key.startswith(self._namespace) or (
            remainder and not remainder.startswith(PATH_SEP)
        ):
            raise ValueError(
                f"Object key {object_key!r} is outside namespace {self._namespace!r}"
            )
        return Key(remainder)

    def to_object_prefix(self, prefix: str = "") -> str:
        """Return the listing prefix for keys starting with ``prefix``.

        The prefix is not normalized, so ``/x/`` only matches keys below
        ``/x`` while ``/x`` also matches ``/xy``.
        """
        return f"{self._namespace}{PATH_SEP}{prefix.lstrip(PATH_SEP)}"

    def root_object_key(self) -> str:
        """Return the object key of the namespace root marker."""
        return self.to_object_key(Key(PATH_SEP))

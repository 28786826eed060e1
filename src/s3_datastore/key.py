"""Hierarchical datastore keys.

A key is a slash-separated path such as ``/Comedy/MontyPython/Actor:JohnCleese``.
Segments are called namespaces; a namespace may carry a type prefix separated
by ``:`` (``Actor:JohnCleese`` has type ``Actor`` and name ``JohnCleese``).

Keys are immutable. Construction cleans the input, so ``Key("a//b/")`` and
``Key("/a/b")`` are the same key.
"""

import posixpath
from functools import total_ordering
from typing import Iterable, Union

PATH_SEP = "/"
TYPE_SEP = ":"


def clean_key_path(raw: str) -> str:
    """Return the canonical form of a key path.

    Adds the leading separator, collapses repeated separators and ``.``/``..``
    segments, and drops a trailing separator (except for the root key).
    """
    if not raw:
        return PATH_SEP

    if not raw.startswith(PATH_SEP):
        raw = PATH_SEP + raw

    cleaned = posixpath.normpath(raw)
    # normpath keeps a leading "//" intact
    if cleaned.startswith("//"):
        cleaned = PATH_SEP + cleaned.lstrip(PATH_SEP)
    return cleaned


@total_ordering
class Key:
    """An immutable hierarchical datastore key."""

    __slots__ = ("_path",)

    def __init__(self, path: Union[str, "Key"] = PATH_SEP, clean: bool = True):
        if isinstance(path, Key):
            path = str(path)
        if not isinstance(path, str):
            raise TypeError(f"Key path must be a string, got {type(path).__name__}")

        if clean:
            path = clean_key_path(path)
        elif not path.startswith(PATH_SEP):
            raise ValueError(f"Invalid key, must start with '{PATH_SEP}': {path!r}")

        object.__setattr__(self, "_path", path)

    def __setattr__(self, name, value):
        raise AttributeError("Key is immutable")

    @classmethod
    def with_namespaces(cls, namespaces: Iterable[str]) -> "Key":
        """Build a key from a list of namespaces."""
        return cls(PATH_SEP.join(namespaces))

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"Key({self._path!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._path == other._path

    def __lt__(self, other: "Key") -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.namespaces() < other.namespaces()

    def __hash__(self) -> int:
        return hash(self._path)

    def namespaces(self) -> list[str]:
        """Return the path segments of the key (empty for the root key)."""
        return [segment for segment in self._path.split(PATH_SEP) if segment]

    def base_namespace(self) -> str:
        """Return the last namespace, e.g. ``Actor:JohnCleese``."""
        namespaces = self.namespaces()
        return namespaces[-1] if namespaces else ""

    def type(self) -> str:
        """Return the type of the last namespace, e.g. ``Actor``."""
        namespace = self.base_namespace()
        if TYPE_SEP not in namespace:
            return ""
        return namespace.rsplit(TYPE_SEP, 1)[0]

    def name(self) -> str:
        """Return the name of the last namespace, e.g. ``JohnCleese``."""
        return self.base_namespace().rsplit(TYPE_SEP, 1)[-1]

    def instance(self, value: str) -> "Key":
        """Return ``/a/b:value`` for key ``/a/b``."""
        return Key(f"{self._path}{TYPE_SEP}{value}")

    def path(self) -> "Key":
        """Return the parent joined with this key's type, e.g. ``/Comedy/Actor``."""
        parent = str(self.parent())
        key_type = self.type()
        if key_type:
            return Key(posixpath.join(parent, key_type))
        return Key(parent)

    def parent(self) -> "Key":
        """Return the parent key; the root key is its own parent."""
        namespaces = self.namespaces()
        if len(namespaces) <= 1:
            return Key(PATH_SEP)
        return Key.with_namespaces(namespaces[:-1])

    def child(self, key: Union[str, "Key"]) -> "Key":
        """Return this key with ``key`` appended."""
        child = Key(key)
        if self._path == PATH_SEP:
            return child
        if str(child) == PATH_SEP:
            return self
        return Key(self._path + str(child), clean=False)

    def concat(self, *keys: Union[str, "Key"]) -> "Key":
        """Return this key with every key in ``keys`` appended."""
        result = self
        for key in keys:
            result = result.child(key)
        return result

    def is_ancestor_of(self, other: "Key") -> bool:
        """Return True when ``other`` lives strictly below this key."""
        if other._path == self._path:
            return False
        if self._path == PATH_SEP:
            return True
        return other._path.startswith(self._path + PATH_SEP)

    def is_descendant_of(self, other: "Key") -> bool:
        """Return True when this key lives strictly below ``other``."""
        return other.is_ancestor_of(self)

    def is_top_level(self) -> bool:
        """Return True when the key has exactly one namespace."""
        return len(self.namespaces()) == 1

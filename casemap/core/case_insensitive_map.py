from __future__ import annotations

import warnings
from collections.abc import Callable, ItemsView, Iterable, Iterator, Mapping, MutableMapping, ValuesView
from typing import Any

from typing_extensions import Self

from casemap.core.constants import CASEMAP_FILE_VERSION
from casemap.core.keys import fold, is_string_like
from casemap.errors import InvalidKeyTypeError, OddArgumentCountError, UnsupportedOperationError
from casemap.logger import logger
from casemap.utils.comparators import deep_equal
from casemap.utils.error_handling import ErrorMode
from casemap.utils.representation.summary import Summarizable, SummaryRow, summarize_value
from casemap.utils.serialization.serializable_mixin import SerializableMixin

_MISSING = object()

ConflictResolver = Callable[[str, Any, Any], Any]
Predicate = Callable[[str, Any], bool]


def _iter_pairs(other: Mapping | Iterable[tuple[Any, Any]]) -> Iterator[tuple[Any, Any]]:
    """Yield (key, value) pairs from a mapping, a keys()-providing object, or an iterable of pairs."""
    if isinstance(other, Mapping):
        return iter(other.items())
    if hasattr(other, "keys"):
        return ((k, other[k]) for k in other.keys())
    return iter(other)


class _FoldedItemsView(ItemsView):
    """Items view whose `(key, value) in view` check ignores key casing."""

    def __contains__(self, item: object) -> bool:
        key, value = item
        original = self._mapping.original_key(key)
        if original is None:
            return False
        return deep_equal(self._mapping._storage[original], value)


class CaseInsensitiveMap(MutableMapping[str, Any], SerializableMixin, Summarizable):
    """
    Mapping with case-insensitive string keys that remembers original casing.

    Description:
        Entries are kept in two aligned dictionaries:
          - `_storage`: original-cased key -> value (insertion ordered)
          - `_lookup`: folded (lowercase) key -> original-cased key

        Every mutation updates both together, so each stored key has exactly
        one lookup entry and vice versa. Writing a key that folds to an
        existing entry replaces that entry, adopting the newly written casing
        (last write wins) and moving it to the end of iteration order.

        Only string-like keys (see `casemap.core.keys.is_string_like`) can be
        written; anything else raises `InvalidKeyTypeError`. Reads never raise
        for such keys and treat them as absent.

    Args:
        data (Mapping | Iterable[tuple[str, Any]], optional):
            Initial entries.
        default (Any, optional):
            Fixed value returned for absent keys on read.
        default_factory (Callable[[Any], Any], optional):
            Called as `default_factory(missing_key)` for absent keys on read.
            Cannot be combined with `default`.
        **kwargs:
            Additional initial entries.

    Example:
    ```python
    headers = CaseInsensitiveMap({"Content-Type": "text/html", "ETag": "abc"})
    headers["content-type"]  # 'text/html'
    headers["CONTENT-TYPE"] = "second"
    list(headers)  # ['ETag', 'CONTENT-TYPE']
    headers == {"etag": "abc", "content-type": "second"}  # True
    ```

    """

    serial_kind = "cim"

    def __init__(
        self,
        data: Mapping | Iterable[tuple[Any, Any]] | None = None,
        /,
        *,
        default: Any = _MISSING,
        default_factory: Callable[[Any], Any] | None = None,
        **kwargs,
    ):
        if default is not _MISSING and default_factory is not None:
            msg = "Cannot configure both `default` and `default_factory`."
            raise ValueError(msg)
        if default_factory is not None and not callable(default_factory):
            msg = f"`default_factory` must be callable, got {type(default_factory)}"
            raise TypeError(msg)

        self._storage: dict[str, Any] = {}
        self._lookup: dict[str, str] = {}
        self._default = default
        self._default_factory = default_factory

        if data is not None:
            for key, value in _iter_pairs(data):
                self[key] = value
        for key, value in kwargs.items():
            self[key] = value

    @classmethod
    def from_flat(
        cls,
        *items: Any,
        default: Any = _MISSING,
        default_factory: Callable[[Any], Any] | None = None,
    ) -> Self:
        """
        Build a map from an alternating key/value sequence.

        Example:
        ```python
        CaseInsensitiveMap.from_flat("Accept", "*/*", "Host", "example.com")
        ```

        Raises:
            OddArgumentCountError: If an odd number of items is given.

        """
        if len(items) % 2 != 0:
            msg = f"Odd number of arguments for {cls.__name__}: expected key/value pairs, got {len(items)} items."
            raise OddArgumentCountError(msg)
        return cls(
            zip(items[0::2], items[1::2], strict=True),
            default=default,
            default_factory=default_factory,
        )

    def _new_like(self, data: Mapping | Iterable[tuple[Any, Any]] | None = None) -> Self:
        """Create an instance of this class sharing the default configuration."""
        return self.__class__(data, default=self._default, default_factory=self._default_factory)

    # ================================================
    # Defaults
    # ================================================
    @property
    def default(self) -> Any:
        """The fixed default value, or None if none is configured."""
        return None if self._default is _MISSING else self._default

    @property
    def default_factory(self) -> Callable[[Any], Any] | None:
        return self._default_factory

    @property
    def has_default(self) -> bool:
        """Whether a fixed default or a default factory is configured."""
        return self._default is not _MISSING or self._default_factory is not None

    def default_for(self, key: Any) -> Any:
        """
        Value reported for an absent `key`.

        The fixed default if configured, otherwise `default_factory(key)` if
        configured, otherwise None.
        """
        if self._default is not _MISSING:
            return self._default
        if self._default_factory is not None:
            return self._default_factory(key)
        return None

    # ================================================
    # Internal helpers
    # ================================================
    def _discard(self, folded: str) -> Any:
        original = self._lookup.pop(folded)
        return self._storage.pop(original)

    def _folded(self) -> dict[str, Any]:
        return {folded: self._storage[original] for folded, original in self._lookup.items()}

    def _remove_where(self, predicate: Predicate) -> Self | None:
        doomed = [key for key, value in self._storage.items() if predicate(key, value)]
        for key in doomed:
            self._discard(fold(key))
        return self if doomed else None

    # ================================================
    # Lookup
    # ================================================
    def original_key(self, key: Any) -> str | None:
        """Return the stored original-cased key matching `key`, or None."""
        if not is_string_like(key):
            return None
        return self._lookup.get(fold(key))

    def __getitem__(self, key: Any) -> Any:
        original = self.original_key(key)
        if original is None:
            return self.__missing__(key)
        return self._storage[original]

    def __missing__(self, key: Any) -> Any:
        if self.has_default:
            return self.default_for(key)
        raise KeyError(key)

    def get(self, key: Any, default: Any = _MISSING) -> Any:
        """
        Return the value for `key`, or a fallback if it is absent.

        An explicit `default` takes precedence over the configured default.
        Keys that are not string-like are reported as absent.
        """
        original = self.original_key(key)
        if original is not None:
            return self._storage[original]
        if default is not _MISSING:
            return default
        return self.default_for(key)

    def fetch(self, key: Any, default: Any = _MISSING, *, factory: Callable[[Any], Any] | None = None) -> Any:
        """
        Strict lookup that ignores the configured default.

        Args:
            key (str): Key to look up.
            default (Any, optional): Returned if `key` is absent.
            factory (Callable[[Any], Any], optional): Called with `key` if it
                is absent. Supersedes `default`.

        Raises:
            KeyError: If `key` is absent and neither `default` nor `factory`
                is given.

        """
        original = self.original_key(key)
        if original is not None:
            return self._storage[original]
        if factory is not None:
            if default is not _MISSING:
                warnings.warn("`factory` supersedes the `default` argument.", category=UserWarning, stacklevel=2)
            return factory(key)
        if default is not _MISSING:
            return default
        msg = f"Key not found: {key!r}"
        raise KeyError(msg)

    def __contains__(self, key: object) -> bool:
        return self.original_key(key) is not None

    def has(self, key: Any) -> bool:
        return key in self

    def has_value(self, value: Any) -> bool:
        return any(deep_equal(v, value) for v in self._storage.values())

    def key_of(self, value: Any) -> str | None:
        """
        Return the first original key whose value equals `value`.

        This is a linear scan in iteration order; values are not indexed.
        """
        for key, v in self._storage.items():
            if deep_equal(v, value):
                return key
        return None

    def values_at(self, *keys: Any) -> list[Any]:
        """Return `get(key)` for each key, in the order given."""
        return [self.get(key) for key in keys]

    def indexes(self, *values: Any):
        """Not supported. Filter with `select()` instead."""
        msg = f"Use {self.__class__.__name__}.select instead."
        raise UnsupportedOperationError(msg)

    def indices(self, *values: Any):
        return self.indexes(*values)

    # ================================================
    # Mutation
    # ================================================
    def __setitem__(self, key: Any, value: Any) -> None:
        if not is_string_like(key):
            raise InvalidKeyTypeError(key)

        key = str(key)
        folded = fold(key)
        previous = self._lookup.get(folded)
        if previous is not None:
            if previous != key:
                logger.debug("Replacing key %r with %r.", previous, key)
            self._discard(folded)

        self._storage[key] = value
        self._lookup[folded] = key

    def store(self, key: Any, value: Any) -> Any:
        """Write `value` under `key` and return it."""
        self[key] = value
        return value

    def setdefault(self, key: Any, default: Any = None) -> Any:
        original = self.original_key(key)
        if original is not None:
            return self._storage[original]
        self[key] = default
        return default

    def __delitem__(self, key: Any) -> None:
        original = self.original_key(key)
        if original is None:
            raise KeyError(key)
        self._discard(fold(original))

    def delete(self, key: Any, fallback: Callable[[Any], Any] | None = None) -> Any:
        """
        Remove `key` and return its value.

        If `key` is absent, returns `fallback(key)` when a fallback is given,
        otherwise `default_for(key)`. Never raises for absent keys.
        """
        original = self.original_key(key)
        if original is not None:
            return self._discard(fold(original))
        if fallback is not None:
            return fallback(key)
        return self.default_for(key)

    def pop(self, key: Any, default: Any = _MISSING) -> Any:
        original = self.original_key(key)
        if original is not None:
            return self._discard(fold(original))
        if default is _MISSING:
            raise KeyError(key)
        return default

    def popitem(self) -> tuple[str, Any]:
        """Remove and return the oldest (key, value) pair."""
        if not self._storage:
            msg = f"popitem(): {self.__class__.__name__} is empty"
            raise KeyError(msg)
        key = next(iter(self._storage))
        return key, self._discard(fold(key))

    def clear(self) -> Self:
        """Remove all entries. The default configuration is kept."""
        self._storage.clear()
        self._lookup.clear()
        return self

    def replace(self, other: Mapping | Iterable[tuple[Any, Any]]) -> Self:
        """
        Replace all entries with those of `other`.

        Raises:
            InvalidKeyTypeError: If `other` holds a key that is not
                string-like. The receiver is left untouched in that case.

        """
        pairs = list(_iter_pairs(other))
        for key, _ in pairs:
            if not is_string_like(key):
                raise InvalidKeyTypeError(key)

        logger.debug("Replacing %d entries with %d entries.", len(self._storage), len(pairs))
        self.clear()
        for key, value in pairs:
            self[key] = value
        return self

    # ================================================
    # Merging
    # ================================================
    def merge(
        self,
        other: Mapping | Iterable[tuple[Any, Any]],
        on_conflict: ConflictResolver | None = None,
    ) -> Self:
        """
        Return a new map holding the entries of this map and `other`.

        Description:
            Entries of `other` are applied in its iteration order. When a key
            already exists and `on_conflict` is given, the stored value becomes
            `on_conflict(key, existing_value, incoming_value)`. Otherwise the
            incoming value (and its key casing) overwrites the existing one.

        Example:
        ```python
        base = CaseInsensitiveMap({"A": "1"})
        base.merge({"a": "2"}, lambda key, old, new: f"{old},{new}")["A"]  # '1,2'
        ```

        """
        merged = self.duplicate()
        for key, value in _iter_pairs(other):
            if on_conflict is not None and key in merged:
                value = on_conflict(key, merged[key], value)
            merged[key] = value
        return merged

    def update(
        self,
        other: Mapping | Iterable[tuple[Any, Any]] = (),
        /,
        *,
        on_conflict: ConflictResolver | None = None,
        **kwargs,
    ) -> Self:
        """
        Merge `other` (and keyword entries) into this map in place.

        Uses the same conflict policy as `merge()`. The receiver is cleared and
        repopulated from the merged result, keeping its default configuration.
        """
        merged = self.merge(other, on_conflict)
        if kwargs:
            merged = merged.merge(kwargs, on_conflict)
        return self.replace(merged)

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.merge(other)

    def __ror__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._new_like(other).update(self)

    def __ior__(self, other):
        return self.update(other)

    # ================================================
    # Equality & copying
    # ================================================
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented

        other_folded = {}
        for key, value in other.items():
            if not is_string_like(key):
                return False
            other_folded[fold(key)] = value

        return deep_equal(self._folded(), other_folded)

    __hash__ = None

    def duplicate(self) -> Self:
        """
        Return an independent copy of this map.

        Storage and lookup are copied; the default value or factory is shared.
        """
        clone = self.__class__.__new__(self.__class__)
        clone._storage = dict(self._storage)
        clone._lookup = dict(self._lookup)
        clone._default = self._default
        clone._default_factory = self._default_factory
        return clone

    def copy(self) -> Self:
        return self.duplicate()

    def __copy__(self) -> Self:
        return self.duplicate()

    # ================================================
    # Views
    # ================================================
    def __iter__(self) -> Iterator[str]:
        return iter(self._storage)

    def __reversed__(self) -> Iterator[str]:
        return reversed(self._storage)

    def __len__(self) -> int:
        return len(self._storage)

    def values(self) -> ValuesView[Any]:
        return self._storage.values()

    def items(self) -> ItemsView[str, Any]:
        return _FoldedItemsView(self)

    def to_dict(self) -> dict[str, Any]:
        """Unwrap to a plain dict keyed by original-cased keys."""
        return dict(self._storage)

    def select(self, predicate: Predicate) -> Self:
        """Return a new map with the entries for which `predicate(key, value)` is true."""
        return self._new_like((k, v) for k, v in self._storage.items() if predicate(k, v))

    def reject(self, predicate: Predicate) -> Self:
        """Return a new map without the entries for which `predicate(key, value)` is true."""
        return self._new_like((k, v) for k, v in self._storage.items() if not predicate(k, v))

    def select_inplace(self, predicate: Predicate) -> Self | None:
        """Keep only matching entries. Returns None if nothing was removed."""
        return self._remove_where(lambda k, v: not predicate(k, v))

    def reject_inplace(self, predicate: Predicate) -> Self | None:
        """Remove matching entries. Returns None if nothing was removed."""
        return self._remove_where(predicate)

    def delete_if(self, predicate: Predicate) -> Self:
        """Remove matching entries and return this map."""
        self._remove_where(predicate)
        return self

    def sorted_items(self) -> list[tuple[str, Any]]:
        """Entries as (key, value) pairs sorted lexically by original key."""
        return sorted(self._storage.items(), key=lambda item: item[0])

    def invert(self, on_collision: ErrorMode | str = ErrorMode.IGNORE) -> dict[Any, str]:
        """
        Return a plain dict mapping each value to its original key.

        Args:
            on_collision (ErrorMode | str): What to do when several keys share
                a value. With IGNORE the last key in iteration order wins, WARN
                emits a UserWarning and then does the same, RAISE raises a
                ValueError. Defaults to IGNORE.

        Raises:
            TypeError: If a value is unhashable and so cannot become a key.

        """
        on_collision = ErrorMode(on_collision)
        inverted: dict[Any, str] = {}
        for key, value in self._storage.items():
            try:
                hash(value)
            except TypeError as e:
                msg = f"invert() requires hashable values, but key '{key}' holds a {type(value).__name__}."
                raise TypeError(msg) from e
            if value in inverted:
                msg = f"Value {value!r} is shared by keys '{inverted[value]}' and '{key}'."
                if on_collision == ErrorMode.RAISE:
                    raise ValueError(msg)
                if on_collision == ErrorMode.WARN:
                    warnings.warn(msg, category=UserWarning, stacklevel=2)
            inverted[value] = key
        return inverted

    # ================================================
    # Serialization
    # ================================================
    def get_state(self) -> dict[str, Any]:
        has_fixed_default = self._default is not _MISSING
        return {
            "version": CASEMAP_FILE_VERSION,
            "entries": list(self._storage.items()),
            "has_default": has_fixed_default,
            "default": self._default if has_fixed_default else None,
            "default_factory": self._default_factory,
        }

    def set_state(self, state: dict[str, Any]) -> None:
        """Restore entries and default configuration. The lookup is rebuilt from entries."""
        self._storage = {}
        self._lookup = {}
        self._default = state["default"] if state.get("has_default") else _MISSING
        self._default_factory = state.get("default_factory")
        for key, value in state["entries"]:
            self[key] = value

    def __getstate__(self) -> dict[str, Any]:
        return self.get_state()

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.set_state(state)

    # ================================================
    # Representation
    # ================================================
    def _summary_rows(self) -> list[SummaryRow]:
        rows: list[SummaryRow] = [("size", str(len(self)))]
        if self._default_factory is not None:
            rows.append(("default_factory", getattr(self._default_factory, "__qualname__", repr(self._default_factory))))
        elif self._default is not _MISSING:
            rows.append(("default", repr(self._default)))
        rows.append(("entries", [(k, summarize_value(v)) for k, v in self._storage.items()]))
        return rows

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._storage!r})"

    def __str__(self) -> str:
        return str(self._storage)

"""Last-Write-Wins Element Dictionary (LWW-Element-Dict) CRDT.

The dictionary keeps two maps:

- an **add-set** of key -> ``TimestampedValue``, holding the latest
  accepted add or update for each key;
- a **remove-set** of key -> timestamp, holding the latest tombstone
  for each key.

A key is visible while it has an add entry that is not dominated by a
tombstone. Tombstones are never deleted, so a replica that later merges
an older re-add still resolves it as removed.

Ties between operations carrying the same timestamp are settled by a
``BiasPolicy``. With the defaults a remove beats a concurrent add and an
update beats a concurrent add.

Example::

    d = LWWDict()
    d.add("k", "v", 1)
    d.remove("k", 1)        # remove wins the tie
    d.add("k", "v2", 2)     # strictly later add revives the key
    assert d.materialize() == {"k": "v2"}

    other = LWWDict({"x": 1}, timestamp=5)
    d.merge(other)
    assert d.lookup("x") == 1
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Self, TypeVar

from lwwdict.bias import DEFAULT_BIAS, BiasPolicy, is_before_with_bias
from lwwdict.protocol import Timestamp
from lwwdict.timestamped_value import TimestampedValue

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
T = TypeVar("T", bound=Timestamp)

_MISSING = object()


def _restore(item: Any) -> Any:
    """Turn lists (as produced by JSON from tuples) back into tuples, recursively."""
    if isinstance(item, list | tuple):
        return tuple(_restore(part) for part in item)
    return item


@dataclass(frozen=True)
class LWWDictStats:
    """Operation counters for an LWWDict replica.

    Attributes:
        adds_applied: Adds that changed the add-set.
        adds_rejected: Adds that lost to an existing entry.
        updates_applied: Updates that changed the add-set.
        updates_rejected: Updates on missing, newer or removed keys.
        removes_applied: Removes that wrote a tombstone.
        removes_rejected: Removes older than (or tied with) the tombstone.
        merges: Completed merges into this replica.
    """

    adds_applied: int = 0
    adds_rejected: int = 0
    updates_applied: int = 0
    updates_rejected: int = 0
    removes_applied: int = 0
    removes_rejected: int = 0
    merges: int = 0


class LWWDict(Generic[K, V, T]):
    """State-based LWW-Element-Dict.

    All mutating operations are no-ops when they lose conflict
    resolution; nothing is raised for a rejected write. One lock per
    instance guards both maps, so a replica may be shared between
    threads.

    Args:
        seed: Optional mapping to pre-populate the dictionary with.
        timestamp: Timestamp applied to every seeded key. Required when
            ``seed`` is given.
        bias: Tie-break policy. Defaults to remove-wins, update-wins.

    Raises:
        ValueError: If ``seed`` is given without ``timestamp``.
    """

    __slots__ = (
        "_adds",
        "_bias",
        "_lock",
        "_merges",
        "_removes",
        "_adds_applied",
        "_adds_rejected",
        "_updates_applied",
        "_updates_rejected",
        "_removes_applied",
        "_removes_rejected",
    )

    def __init__(
        self,
        seed: Mapping[K, V] | None = None,
        timestamp: T | None = None,
        *,
        bias: BiasPolicy = DEFAULT_BIAS,
    ):
        if seed and timestamp is None:
            raise ValueError("timestamp is required when seeding an LWWDict")
        self._bias = bias
        self._lock = threading.Lock()
        self._adds: dict[K, TimestampedValue[V, T]] = {
            key: TimestampedValue(value, timestamp) for key, value in (seed or {}).items()
        }
        self._removes: dict[K, T] = {}
        self._adds_applied = 0
        self._adds_rejected = 0
        self._updates_applied = 0
        self._updates_rejected = 0
        self._removes_applied = 0
        self._removes_rejected = 0
        self._merges = 0

    @property
    def bias(self) -> BiasPolicy:
        """The tie-break policy this replica was built with."""
        return self._bias

    @property
    def value(self) -> dict[K, V]:
        """Materialized view (alias for ``materialize()``)."""
        return self.materialize()

    @property
    def elements(self) -> dict[K, V]:
        """Materialized view (alias for ``materialize()``)."""
        return self.materialize()

    @property
    def entries(self) -> dict[K, TimestampedValue[V, T]]:
        """Copy of the add-set, including keys that are currently removed."""
        with self._lock:
            return dict(self._adds)

    @property
    def tombstones(self) -> dict[K, T]:
        """Copy of the remove-set."""
        with self._lock:
            return dict(self._removes)

    @property
    def stats(self) -> LWWDictStats:
        """Return a frozen snapshot of operation counters."""
        with self._lock:
            return LWWDictStats(
                adds_applied=self._adds_applied,
                adds_rejected=self._adds_rejected,
                updates_applied=self._updates_applied,
                updates_rejected=self._updates_rejected,
                removes_applied=self._removes_applied,
                removes_rejected=self._removes_rejected,
                merges=self._merges,
            )

    # -- operations ---------------------------------------------------------

    def add(self, key: K, value: V, timestamp: T) -> None:
        """Insert ``key`` unless the add-set already holds a newer or equal entry.

        Args:
            key: The key to add.
            value: The value to associate with ``key``.
            timestamp: When the add happened.
        """
        with self._lock:
            current = self._adds.get(key)
            if current is not None and not current.is_before(timestamp):
                self._adds_rejected += 1
                logger.debug(
                    "Rejected add of %r at %r: entry exists at %r",
                    key, timestamp, current.timestamp,
                )
                return
            self._adds[key] = TimestampedValue(value, timestamp)
            self._adds_applied += 1

    def update(self, key: K, value: V, timestamp: T) -> None:
        """Replace the value of an existing, visible key.

        The update is dropped when the key was never added, when the
        current entry is newer (ties go to the update under
        ``update_bias``), or when the key is currently removed. Updates
        never resurrect a removed key.

        Args:
            key: The key to update.
            value: The replacement value.
            timestamp: When the update happened.
        """
        with self._lock:
            current = self._adds.get(key)
            if current is None:
                reason = "key was never added"
            elif not is_before_with_bias(current.timestamp, timestamp, self._bias.update_bias):
                reason = f"entry exists at {current.timestamp!r}"
            elif self._is_removed(key):
                reason = "key is removed"
            else:
                self._adds[key] = TimestampedValue(value, timestamp)
                self._updates_applied += 1
                return
            self._updates_rejected += 1
            logger.debug("Rejected update of %r at %r: %s", key, timestamp, reason)

    def remove(self, key: K, timestamp: T) -> None:
        """Record a tombstone for ``key``.

        Independent of the add-set, so a remove may arrive before the add
        it cancels.

        Args:
            key: The key to remove.
            timestamp: When the remove happened.
        """
        with self._lock:
            if key in self._removes and not self._removes[key] < timestamp:
                self._removes_rejected += 1
                logger.debug(
                    "Rejected remove of %r at %r: tombstone exists at %r",
                    key, timestamp, self._removes[key],
                )
                return
            self._removes[key] = timestamp
            self._removes_applied += 1

    def lookup(self, key: K, default: Any = None) -> V | Any:
        """Return the visible value for ``key``, or ``default``.

        Args:
            key: The key to look up.
            default: Returned when the key is absent or removed.
        """
        with self._lock:
            entry = self._adds.get(key)
            if entry is None or self._is_removed(key):
                return default
            return entry.value

    def is_removed(self, key: K) -> bool:
        """True if ``key`` is hidden by a tombstone (or was only ever removed)."""
        with self._lock:
            return self._is_removed(key)

    def materialize(self) -> dict[K, V]:
        """Return a snapshot of every visible key and its value."""
        with self._lock:
            return {
                key: entry.value
                for key, entry in self._adds.items()
                if not self._is_removed(key)
            }

    def merge(self, other: LWWDict[K, V, T]) -> None:
        """Fold another replica's add-set and remove-set into this one.

        Per key the later timestamp wins. On an exact tie the entry
        already held by this replica is kept.

        Args:
            other: Another LWWDict to merge from.

        Raises:
            TypeError: If ``other`` is not an LWWDict.
        """
        if not isinstance(other, LWWDict):
            raise TypeError("Can only merge with another LWWDict")

        # Snapshot first so the two locks are never held together.
        adds, removes = other._snapshot()

        with self._lock:
            adds_taken = 0
            for key, incoming in adds.items():
                current = self._adds.get(key)
                if current is None or current.is_before(incoming):
                    self._adds[key] = incoming
                    adds_taken += 1

            removes_taken = 0
            for key, incoming_ts in removes.items():
                if key not in self._removes or self._removes[key] < incoming_ts:
                    self._removes[key] = incoming_ts
                    removes_taken += 1

            self._merges += 1

        logger.debug(
            "Merged %d/%d entries and %d/%d tombstones",
            adds_taken, len(adds), removes_taken, len(removes),
        )

    # -- internals ----------------------------------------------------------

    def _is_removed(self, key: K) -> bool:
        # Caller holds self._lock.
        entry = self._adds.get(key)
        if entry is None:
            return key in self._removes
        if key not in self._removes:
            return False
        return is_before_with_bias(entry.timestamp, self._removes[key], self._bias.remove_bias)

    def _snapshot(self) -> tuple[dict[K, TimestampedValue[V, T]], dict[K, T]]:
        with self._lock:
            return dict(self._adds), dict(self._removes)

    # -- copying and serialization ------------------------------------------

    def copy(self) -> LWWDict[K, V, T]:
        """Return an independent replica with the same state, bias and stats.

        The clone's counters start from this replica's values and diverge
        from there.
        """
        with self._lock:
            clone: LWWDict[K, V, T] = LWWDict(bias=self._bias)
            clone._adds = dict(self._adds)
            clone._removes = dict(self._removes)
            clone._adds_applied = self._adds_applied
            clone._adds_rejected = self._adds_rejected
            clone._updates_applied = self._updates_applied
            clone._updates_rejected = self._updates_rejected
            clone._removes_applied = self._removes_applied
            clone._removes_rejected = self._removes_rejected
            clone._merges = self._merges
        return clone

    def to_dict(self) -> dict:
        """Serialize to a plain dict.

        Keys are stored inside lists rather than as dict keys, so
        non-string keys survive. JSON turns tuples into lists;
        ``from_dict`` turns them back into tuples for keys and
        timestamps, so ``(counter, node_id)`` timestamps and tuple keys
        round-trip. Sequence-valued keys and timestamps should therefore
        be tuples. Values are passed through untouched.
        """
        adds, removes = self._snapshot()
        return {
            "type": "LWWDict",
            "bias": self._bias.to_dict(),
            "adds": [[key, entry.value, entry.timestamp] for key, entry in adds.items()],
            "removes": [[key, ts] for key, ts in removes.items()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.

        Raises:
            ValueError: If ``data`` does not describe an LWWDict.
        """
        if data.get("type") != "LWWDict":
            raise ValueError(f"Expected LWWDict data, got type {data.get('type')!r}")
        d = cls(bias=BiasPolicy.from_dict(data.get("bias", {})))
        for key, value, ts in data.get("adds", []):
            d._adds[_restore(key)] = TimestampedValue(value, _restore(ts))
        for key, ts in data.get("removes", []):
            d._removes[_restore(key)] = _restore(ts)
        return d

    # -- container protocol -------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return self.lookup(key, _MISSING) is not _MISSING

    def __getitem__(self, key: K) -> V:
        value = self.lookup(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __len__(self) -> int:
        return len(self.materialize())

    def __iter__(self) -> Iterator[K]:
        return iter(self.materialize())

    def __repr__(self) -> str:
        return f"LWWDict(elements={self.materialize()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LWWDict):
            return NotImplemented
        return self._snapshot() == other._snapshot()

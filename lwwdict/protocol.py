"""Structural interfaces for replicated dictionaries.

A state-based CRDT converges because its merge is:

- **Commutative**: ``merge(a, b) == merge(b, a)``
- **Associative**: ``merge(a, merge(b, c)) == merge(merge(a, b), c)``
- **Idempotent**: ``merge(a, a) == a``

Timestamps are opaque to the engine. Anything that supports ``<`` and
``==`` with a total order works: integers, ``datetime`` instances,
``(counter, node_id)`` tuples, or a custom clock type.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, Protocol, Self, runtime_checkable


class Timestamp(Protocol):
    """A totally ordered, comparable timestamp.

    Bound of the ``T`` type parameter of ``TimestampedValue`` and
    ``LWWDict``. Checked statically, not with ``isinstance``.
    """

    def __lt__(self, other: Any, /) -> bool: ...

    def __eq__(self, other: object, /) -> bool: ...


@runtime_checkable
class CRDT(Protocol):
    """Protocol for state-based CRDT types.

    All CRDTs must support:
    - ``value``: Read the current resolved value.
    - ``merge(other)``: Merge another replica's state (in-place).
    - ``to_dict()`` / ``from_dict()``: Plain-data snapshots.
    """

    @property
    def value(self) -> Any:
        """The current resolved value of this CRDT."""
        ...

    def merge(self, other: Self) -> None:
        """Merge another replica's state into this one (in-place).

        Args:
            other: Another instance of the same CRDT type.
        """
        ...

    def to_dict(self) -> dict:
        """Serialize this CRDT's state to a plain dict."""
        ...

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize a CRDT from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.
        """
        ...


@runtime_checkable
class LWWDictionary(Protocol):
    """The dictionary interface exposed to replication orchestration."""

    def add(self, key: Hashable, value: Any, timestamp: Timestamp) -> None: ...

    def update(self, key: Hashable, value: Any, timestamp: Timestamp) -> None: ...

    def remove(self, key: Hashable, timestamp: Timestamp) -> None: ...

    def lookup(self, key: Hashable, default: Any = None) -> Any: ...

    def merge(self, other: Self) -> None: ...

    def materialize(self) -> Mapping[Hashable, Any]: ...

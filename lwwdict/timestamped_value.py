"""A value tagged with the timestamp of the write that produced it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Self, TypeVar

from lwwdict.protocol import Timestamp

V = TypeVar("V")
T = TypeVar("T", bound=Timestamp)


@dataclass(frozen=True)
class TimestampedValue(Generic[V, T]):
    """Immutable ``(value, timestamp)`` pair.

    Attributes:
        value: The opaque payload.
        timestamp: When the write happened. Any totally ordered type.
    """

    value: V
    timestamp: T

    def is_before(self, other: TimestampedValue[Any, T] | T) -> bool:
        """True iff this timestamp is strictly earlier than ``other``'s.

        Args:
            other: Another TimestampedValue, or a raw timestamp.
        """
        if isinstance(other, TimestampedValue):
            other = other.timestamp
        return self.timestamp < other

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return {"value": self.value, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.
        """
        return cls(value=data["value"], timestamp=data["timestamp"])

"""Tie-break policy for operations that carry identical timestamps.

Two writes to the same key with the same timestamp need a deterministic
winner, otherwise replicas can disagree. The policy is fixed per
dictionary and passed in at construction::

    from lwwdict import BiasPolicy, LWWDict

    d = LWWDict(bias=BiasPolicy(remove_bias=False))

Environment variables (read by ``BiasPolicy.from_env``):
    LWW_REMOVE_BIAS: Whether a remove beats an add at the same timestamp.
    LWW_UPDATE_BIAS: Whether an update beats an add at the same timestamp.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Self

from lwwdict.protocol import Timestamp

__all__ = ["BiasPolicy", "DEFAULT_BIAS", "is_before_with_bias"]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _coerce_flag(name: str, raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return default
    if isinstance(raw, str):
        text = raw.strip().lower()
        if not text:
            return default
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_flag(name: str, default: bool) -> bool:
    return _coerce_flag(name, os.environ.get(name), default)


def is_before_with_bias(earlier: Timestamp, later: Timestamp, bias: bool) -> bool:
    """Return True if ``earlier`` precedes ``later``.

    With ``bias`` set, equal timestamps also count as preceding, which
    hands the tie to the operation stamped ``later``.

    Args:
        earlier: Timestamp of the existing add.
        later: Timestamp of the competing update or remove.
        bias: Whether ties favour the competing operation.
    """
    return earlier < later or (bias and earlier == later)


@dataclass(frozen=True)
class BiasPolicy:
    """Which operation wins a tie.

    Attributes:
        remove_bias: A remove and an add at the same timestamp resolve
            to removed.
        update_bias: An update at the same timestamp as the current add
            replaces it.
    """

    remove_bias: bool = True
    update_bias: bool = True

    @classmethod
    def from_env(cls) -> Self:
        """Build a policy from ``LWW_REMOVE_BIAS`` / ``LWW_UPDATE_BIAS``.

        Unset variables keep the defaults.

        Raises:
            ValueError: If a variable is set to something other than a
                recognised boolean flag.
        """
        return cls(
            remove_bias=_parse_flag("LWW_REMOVE_BIAS", True),
            update_bias=_parse_flag("LWW_UPDATE_BIAS", True),
        )

    def to_dict(self) -> dict:
        return {"remove_bias": self.remove_bias, "update_bias": self.update_bias}

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Flags may be real booleans or the same strings ``from_env`` accepts.

        Raises:
            ValueError: If a flag is neither.
        """
        return cls(
            remove_bias=_coerce_flag("remove_bias", data.get("remove_bias"), True),
            update_bias=_coerce_flag("update_bias", data.get("update_bias"), True),
        )


DEFAULT_BIAS = BiasPolicy()

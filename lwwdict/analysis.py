"""Tabular views of replica state for debugging replication.

Example::

    from lwwdict.analysis import convergence_frame, state_frame

    print(state_frame(replica_a))
    print(convergence_frame({"a": replica_a, "b": replica_b}))
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from lwwdict.lww_dict import LWWDict

STATE_COLUMNS = ["key", "value", "added_at", "removed_at", "live"]
CONVERGED = "converged"


def _named(replicas: Mapping[str, LWWDict] | Sequence[LWWDict]) -> dict[str, LWWDict]:
    if isinstance(replicas, Mapping):
        return dict(replicas)
    return {f"replica-{i}": replica for i, replica in enumerate(replicas)}


def state_frame(lww: LWWDict) -> pd.DataFrame:
    """One row per key the replica has ever seen.

    Keys that were only removed have no value and no ``added_at``.

    Args:
        lww: The replica to inspect.

    Returns:
        DataFrame with columns ``key``, ``value``, ``added_at``,
        ``removed_at`` and ``live``.
    """
    entries = lww.entries
    tombstones = lww.tombstones
    visible = lww.materialize()

    keys = list(entries)
    keys.extend(key for key in tombstones if key not in entries)

    rows = []
    for key in keys:
        entry = entries.get(key)
        rows.append({
            "key": key,
            "value": entry.value if entry is not None else None,
            "added_at": entry.timestamp if entry is not None else None,
            "removed_at": tombstones.get(key),
            "live": key in visible,
        })
    return pd.DataFrame(rows, columns=STATE_COLUMNS)


def replicas_converged(replicas: Mapping[str, LWWDict] | Sequence[LWWDict]) -> bool:
    """True if every replica materializes the same mapping."""
    views = [replica.materialize() for replica in _named(replicas).values()]
    return all(view == views[0] for view in views[1:])


def convergence_frame(replicas: Mapping[str, LWWDict] | Sequence[LWWDict]) -> pd.DataFrame:
    """Compare the visible value of every key across replicas.

    Args:
        replicas: Replicas keyed by name, or a sequence (named
            ``replica-0``, ``replica-1``, ...).

    Returns:
        DataFrame indexed by key with one column per replica holding the
        visible value (None when absent) and a boolean ``converged``
        column that is True when all replicas agree on the key.
    """
    named = _named(replicas)
    views = {name: replica.materialize() for name, replica in named.items()}

    keys: list = []
    seen: set = set()
    for view in views.values():
        for key in view:
            if key not in seen:
                seen.add(key)
                keys.append(key)

    missing = object()
    rows = []
    for key in keys:
        row = {name: view.get(key) for name, view in views.items()}
        observed = [view.get(key, missing) for view in views.values()]
        row[CONVERGED] = all(o is not missing for o in observed) and all(
            o == observed[0] for o in observed[1:]
        )
        rows.append(row)

    return pd.DataFrame(rows, columns=[*views, CONVERGED], index=pd.Index(keys, name="key"))

"""LWW Dictionary Demo: three replicas diverge and converge.

Architecture::

    Writes ──► replica-a ◄──merge──► replica-b ◄──merge──► replica-c ◄── Writes

Demonstrates:
1. Every replica accepts writes independently (no coordination).
2. Ties are resolved by the bias policy (remove beats add, update beats add).
3. Merging in different orders yields the same materialized view.
4. Tombstones keep a removed key hidden even when an older add arrives later.
"""

from datetime import datetime, timedelta

import lwwdict
from lwwdict import LWWDict
from lwwdict.analysis import convergence_frame, replicas_converged, state_frame


def main():
    lwwdict.configure_from_env()
    start = datetime(2024, 1, 1, 12, 0, 0)

    def at(seconds: int) -> datetime:
        return start + timedelta(seconds=seconds)

    # --- Setup: a shared starting point ---
    base = LWWDict({"theme": "light", "language": "en"}, start)
    replica_a = base.copy()
    replica_b = base.copy()
    replica_c = LWWDict()

    # --- Divergent writes ---
    replica_a.update("theme", "dark", at(10))
    replica_a.add("font", "serif", at(12))

    replica_b.update("theme", "solarized", at(11))
    replica_b.remove("language", at(5))

    replica_c.add("language", "fr", at(3))  # older than b's tombstone
    replica_c.add("font", "mono", at(12))   # same instant as a's add
    replica_c.remove("font", at(12))        # remove wins the tie locally

    replicas = {"a": replica_a, "b": replica_b, "c": replica_c}
    print("=== Before merging ===")
    print(convergence_frame(replicas))

    # --- Merge in two different orders ---
    left = replica_a.copy()
    left.merge(replica_b)
    left.merge(replica_c)

    right = replica_c.copy()
    right.merge(replica_b)
    right.merge(replica_a)

    print("\n=== After merging ===")
    print(convergence_frame({"a<-b<-c": left, "c<-b<-a": right}))
    print("\n=== Per-key state (a<-b<-c) ===")
    print(state_frame(left))

    assert replicas_converged([left, right])
    assert left.materialize() == {"theme": "solarized"}
    print("\nReplicas converged!")


if __name__ == "__main__":
    main()

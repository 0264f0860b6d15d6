"""Last-Write-Wins Element Dictionary CRDT.

Replicas accept adds, updates and removes independently and converge by
merging full state. Timestamps are supplied by the caller and only need
to be totally ordered.

- **LWWDict**: The dictionary engine (add/update/remove/lookup/merge).
- **TimestampedValue**: Immutable ``(value, timestamp)`` pair.
- **BiasPolicy**: Tie-break configuration for equal timestamps.

Pandas inspection helpers live in ``lwwdict.analysis``.
"""

import logging

from lwwdict.bias import DEFAULT_BIAS, BiasPolicy, is_before_with_bias
from lwwdict.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from lwwdict.lww_dict import LWWDict, LWWDictStats
from lwwdict.protocol import CRDT, LWWDictionary, Timestamp
from lwwdict.timestamped_value import TimestampedValue

# Silent unless the application configures logging.
logging.getLogger("lwwdict").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "CRDT",
    "DEFAULT_BIAS",
    "BiasPolicy",
    "LWWDict",
    "LWWDictStats",
    "LWWDictionary",
    "Timestamp",
    "TimestampedValue",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_file_logging",
    "enable_json_logging",
    "is_before_with_bias",
    "set_level",
    "set_module_level",
]

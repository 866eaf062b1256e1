"""Swap between two async service implementations at runtime.

Public API:
    Strangler / strangle(feature_flag, new, old, on_comparison, config)
    StranglerMode, StranglerConfig, Comparison, CallArguments
    Equal, Unequal, default_equality
    log_strangler_comparison
    static_flag, env_flag, settings_flag
"""

from strangler.dispatch import Strangler, strangle
from strangler.equality import Equal, Unequal, default_equality
from strangler.exceptions import (
    ExecutionError,
    InvalidModeError,
    NotAsyncOperationError,
    StranglerError,
)
from strangler.flags import env_flag, settings_flag, static_flag
from strangler.modes import parse_mode
from strangler.on_comparison import log_strangler_comparison
from strangler.types import (
    CallArguments,
    Comparison,
    ExecutionOutcome,
    StranglerConfig,
    StranglerMode,
)

__all__ = [
    "Strangler",
    "strangle",
    "StranglerMode",
    "StranglerConfig",
    "Comparison",
    "CallArguments",
    "ExecutionOutcome",
    "Equal",
    "Unequal",
    "default_equality",
    "parse_mode",
    "log_strangler_comparison",
    "static_flag",
    "env_flag",
    "settings_flag",
    "StranglerError",
    "InvalidModeError",
    "NotAsyncOperationError",
    "ExecutionError",
]

"""Shared types for the strangler proxy.

Design principles:
- Nothing here outlives a single call except ``StranglerConfig``.
- A ``Comparison`` is only built when a discrepancy is found, handed to the
  caller's callback and then dropped.
- Durations are milliseconds, measured with ``time.perf_counter()``.
"""

import logging
from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from strangler.equality import Equal, EqualityVerdict, Unequal, default_equality
from strangler.exceptions import ExecutionError


class StranglerMode(StrEnum):
    """Runtime dispatch policy returned by the feature flag.

    - ``old``: call the old implementation.
    - ``new``: call the new implementation (old if the operation is missing).
    - ``old-compare``: respond with old, run new alongside and compare.
    - ``new-compare``: respond with new, run old alongside and compare.
    """

    OLD = "old"
    NEW = "new"
    OLD_COMPARE = "old-compare"
    NEW_COMPARE = "new-compare"

    @property
    def is_compare(self) -> bool:
        return self in (StranglerMode.OLD_COMPARE, StranglerMode.NEW_COMPARE)

    @property
    def prefers_new(self) -> bool:
        """True when the new implementation's result reaches the caller."""
        return self in (StranglerMode.NEW, StranglerMode.NEW_COMPARE)


AsyncOperation = Callable[..., Awaitable[Any]]

# Plain string rather than StranglerMode: flag services return strings and
# the value is validated on every call.
FeatureFlag = Callable[[], Awaitable[str]]

EqualityFn = Callable[[Any, Any, "CallArguments"], Union[bool, EqualityVerdict]]


@dataclass(frozen=True)
class CallArguments:
    """Arguments a proxied operation was invoked with."""

    args: tuple = ()
    kwargs: dict = field(default_factory=dict)


@dataclass
class ExecutionOutcome:
    """Result of running one implementation's operation.

    Exactly one of ``value`` / ``error`` is meaningful, as told by ``failed``.
    """

    duration_ms: float
    value: Any = None
    error: Optional[ExecutionError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def result(self) -> Any:
        """The value, or the original exception if the execution failed."""
        return self.error.cause if self.error is not None else self.value


@dataclass
class Comparison:
    """Discrepancy report handed to the on-comparison callback.

    ``old_result`` / ``new_result`` hold the original exception in place of
    a value for any side that raised.
    """

    old_result: Any
    new_result: Any
    old_duration: float
    new_duration: float
    method_name: str
    parameters: CallArguments
    equality_metadata: Optional[dict] = None

    @property
    def duration_difference(self) -> float:
        """New minus old, in milliseconds. Positive means new is slower."""
        return self.new_duration - self.old_duration

    @property
    def old_failed(self) -> bool:
        return isinstance(self.old_result, BaseException)

    @property
    def new_failed(self) -> bool:
        return isinstance(self.new_result, BaseException)

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["parameters"] = {
            "args": list(self.parameters.args),
            "kwargs": dict(self.parameters.kwargs),
        }
        data["duration_difference"] = self.duration_difference
        return data


OnComparison = Callable[[Comparison], Union[None, Awaitable[None]]]


def _default_logger() -> Any:
    return logging.getLogger("strangler")


@dataclass(frozen=True)
class StranglerConfig:
    """Per-proxy configuration, fixed for the proxy's lifetime.

    acceptable_duration_difference: milliseconds the new implementation may
        be slower than the old before a comparison is reported.
    logger: anything with an ``error`` method; calls are skipped if absent.
    equality_fn: ``(old, new, parameters) -> bool | Equal | Unequal``.
    wait_for_comparison: hold the caller's response until the secondary
        execution and its comparison have settled.
    """

    acceptable_duration_difference: float = 300.0
    logger: Any = field(default_factory=_default_logger)
    equality_fn: EqualityFn = default_equality
    wait_for_comparison: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.acceptable_duration_difference, (int, float)):
            raise TypeError(
                "acceptable_duration_difference must be a number, got "
                f"{type(self.acceptable_duration_difference).__name__}"
            )
        if not callable(self.equality_fn):
            raise TypeError("equality_fn must be callable")

    @classmethod
    def merge(
        cls,
        overrides: Union["StranglerConfig", Mapping[str, Any], None] = None,
    ) -> "StranglerConfig":
        """Merge caller settings over the defaults.

        ``None`` values are ignored so callers can pass partial mappings.
        Unknown keys raise ``TypeError``.
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, cls):
            return overrides
        return cls(**{k: v for k, v in overrides.items() if v is not None})

"""Exception types raised (or captured) by the strangler proxy.

Callers of a strangled service only ever see the primary implementation's
own exceptions. The types here cover misuse of the proxy and the internal
capture of failed executions during comparison.
"""

from typing import Any


class StranglerError(Exception):
    """Base class for all strangler errors."""


class InvalidModeError(StranglerError, ValueError):
    """Raised by strict mode parsing when a value is not a known mode.

    The proxy itself never raises this; it logs and falls back to "old".
    """

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid StranglerMode: {value}")


class NotAsyncOperationError(StranglerError, TypeError):
    """Raised when a wrapped operation does not return an awaitable."""

    def __init__(self, method_name: str, returned: Any):
        self.method_name = method_name
        self.returned = returned
        super().__init__(
            f"Operation '{method_name}' returned {type(returned).__name__}, "
            "expected an awaitable. Only async operations can be strangled."
        )


class ExecutionError(StranglerError):
    """Captured failure of one implementation's execution.

    Carries the original exception and how long the execution ran before
    failing. Only used internally; the cause is what reaches callers.
    """

    def __init__(self, cause: BaseException, duration_ms: float):
        self.cause = cause
        self.duration_ms = duration_ms
        super().__init__(str(cause) or type(cause).__name__)

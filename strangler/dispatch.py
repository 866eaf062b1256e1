"""Strangler proxy: per-call mode resolution and dispatch.

Call flow:
  resolve mode -> pick implementation(s) -> single call, or both run
  concurrently -> caller gets the primary result -> the secondary result is
  compared in a background task (or awaited first, if configured).

Dispatch rules:
  - ``new`` uses the new implementation when it defines the operation.
  - Anything else, and any operation the new implementation lacks, uses old.
  - Compare modes run both only when the new implementation defines the
    operation; otherwise they are a plain call to old.
"""

import asyncio
import functools
import logging
from typing import Any, Mapping, Optional, Union

from strangler.comparator import execute_timed, reconcile
from strangler.core.logging import bind_mode
from strangler.modes import resolve_mode
from strangler.service import collect_operations, invoke
from strangler.types import (
    AsyncOperation,
    CallArguments,
    FeatureFlag,
    OnComparison,
    StranglerConfig,
    StranglerMode,
)

logger = logging.getLogger(__name__)

ConfigLike = Union[StranglerConfig, Mapping[str, Any], None]


class Strangler:
    """Drop-in stand-in for the old implementation, switchable at runtime.

    Every public operation of ``old_implementation`` becomes an attribute
    of the proxy with the same name, so ``await proxy.get_user(42)`` works
    as it did on the old service. ``new_implementation`` may be partial.

    Operation names win over the helpers below (``call``, ``drain``,
    ``config``, ``operations``) if they collide; the helpers stay reachable
    through the class, e.g. ``Strangler.call(proxy, "call", ...)`` or
    ``Strangler.config.func(proxy)``. Names starting with an underscore are
    reachable only through ``call``.
    """

    def __init__(
        self,
        feature_flag: FeatureFlag,
        new_implementation: Any,
        old_implementation: Any,
        on_comparison: Optional[OnComparison] = None,
        config: ConfigLike = None,
    ):
        self._feature_flag = feature_flag
        self._old = collect_operations(old_implementation)
        self._new = collect_operations(new_implementation)
        self._on_comparison = on_comparison
        self._config = StranglerConfig.merge(config)
        self._pending: set[asyncio.Task] = set()

        for name, operation in self._old.items():
            if not name.startswith("_"):
                # Instance dict entries shadow the helpers, which are all
                # non-data descriptors.
                self.__dict__[name] = self._bind(name, operation)

        logger.debug(
            "Strangler wrapping %d operations, %d with a new implementation",
            len(self._old),
            sum(1 for name in self._old if name in self._new),
        )

    @functools.cached_property
    def config(self) -> StranglerConfig:
        return self._config

    @functools.cached_property
    def operations(self) -> tuple[str, ...]:
        return tuple(self._old)

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._old

    def __repr__(self) -> str:
        return f"<Strangler operations={len(self._old)} pending={len(self._pending)}>"

    def _bind(self, method_name: str, operation: AsyncOperation) -> AsyncOperation:
        async def proxied(*args: Any, **kwargs: Any) -> Any:
            return await Strangler.call(self, method_name, *args, **kwargs)

        return functools.wraps(operation)(proxied)

    async def call(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke ``method_name`` under the mode the feature flag returns now.

        Raises:
            AttributeError: If the old implementation has no such operation.
            Exception: Whatever the primary implementation raised, unwrapped.
        """
        if method_name not in self._old:
            raise AttributeError(f"Strangled service has no operation '{method_name}'")

        mode = await resolve_mode(self._feature_flag, self._config.logger)
        parameters = CallArguments(args, kwargs)
        has_new = method_name in self._new

        with bind_mode(mode.value):
            logger.debug("Dispatching %s has_new=%s", method_name, has_new)
            if mode.is_compare and has_new:
                return await self._compare(mode, method_name, parameters)

            if mode is StranglerMode.NEW and has_new:
                operation = self._new[method_name]
            else:
                operation = self._old[method_name]
            return await invoke(method_name, operation, parameters)

    async def _compare(
        self,
        mode: StranglerMode,
        method_name: str,
        parameters: CallArguments,
    ) -> Any:
        old_task = asyncio.ensure_future(
            execute_timed(method_name, self._old[method_name], parameters)
        )
        new_task = asyncio.ensure_future(
            execute_timed(method_name, self._new[method_name], parameters)
        )
        if mode.prefers_new:
            primary_task, secondary_task = new_task, old_task
        else:
            primary_task, secondary_task = old_task, new_task
        self._track(primary_task)
        self._track(secondary_task)

        # Cancelling the caller must not cancel either execution.
        primary = await asyncio.shield(primary_task)

        reconciliation: Optional[asyncio.Task] = None
        if self._on_comparison is not None:
            reconciliation = self._track(
                asyncio.create_task(
                    reconcile(
                        mode,
                        method_name,
                        parameters,
                        primary,
                        secondary_task,
                        self._config,
                        self._on_comparison,
                    )
                )
            )

        if self._config.wait_for_comparison:
            await asyncio.shield(
                reconciliation if reconciliation is not None else secondary_task
            )

        if primary.error is not None:
            raise primary.error.cause
        return primary.value

    def _track(self, task: asyncio.Future) -> asyncio.Future:
        # The event loop only keeps weak references to tasks.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight secondary execution and comparison."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


def strangle(
    feature_flag: FeatureFlag,
    new_implementation: Any,
    old_implementation: Any,
    on_comparison: Optional[OnComparison] = None,
    config: ConfigLike = None,
) -> Strangler:
    """Wrap two implementations behind a feature flag.

    Args:
        feature_flag: Async callable returning the current mode string.
        new_implementation: The new service; may define only some operations.
        old_implementation: The existing service; defines the proxy's surface.
        on_comparison: Called when compare-mode results differ or the new
            implementation is slower than the configured threshold.
        config: ``StranglerConfig`` or a mapping of its fields.

    Returns:
        A proxy exposing the old implementation's operations.
    """
    return Strangler(feature_flag, new_implementation, old_implementation, on_comparison, config)

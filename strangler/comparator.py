"""Timing, equality evaluation and discrepancy reporting.

Everything here runs per call and keeps no state. `reconcile` is scheduled
by the dispatcher after the primary result is known, so its work (and any
failure inside it) stays off the caller's response path.
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Optional

from strangler.core.logging import log_error
from strangler.equality import EqualityVerdict, to_verdict
from strangler.exceptions import ExecutionError
from strangler.service import invoke
from strangler.types import (
    AsyncOperation,
    CallArguments,
    Comparison,
    EqualityFn,
    ExecutionOutcome,
    OnComparison,
    StranglerConfig,
    StranglerMode,
)

logger = logging.getLogger(__name__)


async def execute_timed(
    method_name: str,
    operation: AsyncOperation,
    parameters: CallArguments,
) -> ExecutionOutcome:
    """Run one implementation and time it, capturing any failure.

    Never raises (short of cancellation): a failure becomes an outcome whose
    ``error`` carries the cause and the time spent before it happened.
    """
    start = time.perf_counter()
    try:
        value = await invoke(method_name, operation, parameters)
    except Exception as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        return ExecutionOutcome(
            duration_ms=duration_ms,
            error=ExecutionError(exc, duration_ms),
        )
    return ExecutionOutcome(duration_ms=(time.perf_counter() - start) * 1000, value=value)


def evaluate_equality(
    equality_fn: EqualityFn,
    old_value: Any,
    new_value: Any,
    parameters: CallArguments,
) -> EqualityVerdict:
    """Apply the equality function and normalise its answer to a verdict."""
    return to_verdict(equality_fn(old_value, new_value, parameters))


def should_report(
    verdict: EqualityVerdict,
    old_duration: float,
    new_duration: float,
    acceptable_duration_difference: float,
) -> bool:
    """Report unequal results, or a new implementation that got slower.

    Only ``new - old`` is checked, so a faster new implementation is never
    reported on timing alone.
    """
    if not verdict.is_equal:
        return True
    return (new_duration - old_duration) > acceptable_duration_difference


async def reconcile(
    mode: StranglerMode,
    method_name: str,
    parameters: CallArguments,
    primary: ExecutionOutcome,
    secondary: "asyncio.Future[ExecutionOutcome]",
    config: StranglerConfig,
    on_comparison: OnComparison,
) -> Optional[Comparison]:
    """Wait for the secondary execution, compare, and report if needed.

    Results are mapped to old/new by mode, not by primary/secondary.
    Equality and callback failures are logged through ``config.logger`` and
    swallowed. Returns the emitted comparison, or None if nothing was sent.
    """
    secondary_outcome = await secondary
    if mode.prefers_new:
        old, new = secondary_outcome, primary
    else:
        old, new = primary, secondary_outcome

    try:
        verdict = evaluate_equality(config.equality_fn, old.result, new.result, parameters)
    except Exception as exc:
        log_error(
            config.logger,
            "[Strangler] Equality function failed for %s: %s",
            method_name,
            exc=exc,
        )
        return None

    if not should_report(
        verdict, old.duration_ms, new.duration_ms, config.acceptable_duration_difference
    ):
        return None

    comparison = Comparison(
        old_result=old.result,
        new_result=new.result,
        old_duration=old.duration_ms,
        new_duration=new.duration_ms,
        method_name=method_name,
        parameters=parameters,
        equality_metadata=verdict.metadata,
    )
    logger.debug(
        "Discrepancy in %s mode=%s equal=%s old=%.1fms new=%.1fms",
        method_name,
        mode.value,
        verdict.is_equal,
        old.duration_ms,
        new.duration_ms,
    )

    try:
        emitted = on_comparison(comparison)
        if inspect.isawaitable(emitted):
            await emitted
    except Exception as exc:
        log_error(
            config.logger,
            "[Strangler] Comparison callback failed for %s: %s",
            method_name,
            exc=exc,
        )
        return None
    return comparison

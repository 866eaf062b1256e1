"""Mode resolution.

The feature flag is awaited on every intercepted call; nothing is cached, so
consecutive calls may land on different modes. Unknown values are logged and
downgraded to ``old`` without surfacing anything to the caller.
"""

from typing import Any

from strangler.core.logging import log_error
from strangler.exceptions import InvalidModeError
from strangler.types import FeatureFlag, StranglerMode

VALID_MODES = frozenset(mode.value for mode in StranglerMode)

FALLBACK_MODE = StranglerMode.OLD


def is_valid_mode(value: Any) -> bool:
    return isinstance(value, str) and value in VALID_MODES


def parse_mode(value: Any) -> StranglerMode:
    """Strictly convert ``value`` to a StranglerMode.

    Raises:
        InvalidModeError: If ``value`` is not one of the four known modes.
    """
    if not is_valid_mode(value):
        raise InvalidModeError(value)
    return StranglerMode(value)


async def resolve_mode(feature_flag: FeatureFlag, logger: Any) -> StranglerMode:
    """Ask the feature flag for the current mode.

    Exceptions raised by the flag itself propagate: without a flag value
    there is no safe basis for choosing an implementation.
    """
    value = await feature_flag()
    if not is_valid_mode(value):
        log_error(logger, "Invalid StranglerMode: %s", value)
        return FALLBACK_MODE
    return StranglerMode(value)

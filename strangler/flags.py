"""Ready-made feature flag providers.

Each provider is a zero-argument coroutine function returning a mode string,
re-evaluated on every proxied call.
"""

import os
from typing import Optional

from strangler.core.config import StranglerSettings
from strangler.types import FeatureFlag, StranglerMode


def static_flag(mode: str) -> FeatureFlag:
    """Always return ``mode``. Handy for tests and one-off scripts."""

    async def flag() -> str:
        return mode

    return flag


def env_flag(variable: str, default: str = StranglerMode.OLD.value) -> FeatureFlag:
    """Read the mode from an environment variable at call time."""

    async def flag() -> str:
        return os.environ.get(variable, default)

    return flag


def settings_flag(settings: Optional[StranglerSettings] = None) -> FeatureFlag:
    """Return ``default_mode`` from strangler settings.

    With no ``settings`` the environment is re-read on every call, so
    changing ``STRANGLER_DEFAULT_MODE`` takes effect without a restart.
    """

    async def flag() -> str:
        current = settings if settings is not None else StranglerSettings()
        return current.default_mode

    return flag

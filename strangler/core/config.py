from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from strangler.modes import parse_mode
from strangler.types import StranglerConfig


class StranglerSettings(BaseSettings):
    """Strangler defaults loaded from environment variables.

    Every field maps to ``STRANGLER_<FIELD>``, e.g.
    ``STRANGLER_ACCEPTABLE_DURATION_DIFFERENCE=150``. A ``.env`` file in the
    working directory is read too.

    ``default_mode`` only feeds `strangler.flags.settings_flag`; proxies
    built with another flag ignore it.
    """

    model_config = SettingsConfigDict(
        env_prefix="STRANGLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Milliseconds the new implementation may lag before it is reported.
    acceptable_duration_difference: float = 300.0

    # Hold responses until the comparison has run. Adds the secondary's
    # latency to every compare-mode call.
    wait_for_comparison: bool = False

    default_mode: str = "old"

    # Console rendering instead of JSON when configuring structlog.
    debug: bool = True

    @field_validator("acceptable_duration_difference")
    @classmethod
    def non_negative_threshold(cls, v: float) -> float:
        if v < 0:
            raise ValueError("acceptable_duration_difference must be >= 0")
        return v

    @field_validator("default_mode")
    @classmethod
    def known_mode(cls, v: str) -> str:
        return parse_mode(v).value

    def to_config(self, **overrides) -> StranglerConfig:
        """Build a proxy configuration from these settings.

        Keyword overrides (``logger``, ``equality_fn``...) win over settings.
        """
        values = {
            "acceptable_duration_difference": self.acceptable_duration_difference,
            "wait_for_comparison": self.wait_for_comparison,
        }
        values.update(overrides)
        return StranglerConfig.merge(values)


def get_settings() -> StranglerSettings:
    return StranglerSettings()

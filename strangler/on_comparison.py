"""Standard on-comparison callback that logs each discrepancy."""

import logging
from typing import Any, Optional

from strangler.types import Comparison, OnComparison


def log_strangler_comparison(name: str, logger: Optional[Any] = None) -> OnComparison:
    """Build a callback that logs one warning per reported comparison.

    Args:
        name: Identifies the strangled service in the log line.
        logger: Anything with a ``warning`` method. Defaults to the
            ``strangler.comparison`` stdlib logger.
    """
    target = logger if logger is not None else logging.getLogger("strangler.comparison")

    def on_comparison(comparison: Comparison) -> None:
        target.warning(
            "[Strangler] Difference in %s#%s detected.",
            name,
            comparison.method_name,
            extra={"comparison": {"name": name, **comparison.to_dict()}},
        )

    return on_comparison

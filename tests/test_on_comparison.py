"""Tests for strangler/on_comparison.py."""

import logging
from unittest.mock import MagicMock

import pytest

from strangler import CallArguments, Comparison, Strangler, log_strangler_comparison, static_flag


def _comparison() -> Comparison:
    return Comparison(
        old_result="old",
        new_result="new",
        old_duration=1.0,
        new_duration=2.0,
        method_name="method1",
        parameters=CallArguments(("x",), {}),
    )


class TestLogStranglerComparison:
    def test_logs_one_warning(self) -> None:
        logger = MagicMock()

        log_strangler_comparison("BillingService", logger)(_comparison())

        logger.warning.assert_called_once()
        args = logger.warning.call_args.args
        assert args[0] % args[1:] == "[Strangler] Difference in BillingService#method1 detected."
        extra = logger.warning.call_args.kwargs["extra"]["comparison"]
        assert extra["name"] == "BillingService"
        assert extra["old_result"] == "old"
        assert extra["new_result"] == "new"

    def test_default_logger(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="strangler.comparison"):
            log_strangler_comparison("BillingService")(_comparison())

        assert "Difference in BillingService#method1" in caplog.text
        assert caplog.records[0].comparison["method_name"] == "method1"

    @pytest.mark.asyncio
    async def test_usable_as_proxy_callback(self) -> None:
        logger = MagicMock()

        async def old():
            return 1

        async def new():
            return 2

        service = Strangler(
            static_flag("old-compare"),
            {"method1": new},
            {"method1": old},
            log_strangler_comparison("Counter", logger),
        )

        assert await service.method1() == 1
        await service.drain()

        logger.warning.assert_called_once()

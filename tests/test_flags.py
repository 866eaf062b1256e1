"""Tests for strangler/flags.py."""

import pytest

from strangler import env_flag, settings_flag, static_flag
from strangler.core.config import StranglerSettings


class TestFlags:
    @pytest.mark.asyncio
    async def test_static_flag(self) -> None:
        assert await static_flag("new")() == "new"

    @pytest.mark.asyncio
    async def test_env_flag_reads_each_call(self, monkeypatch) -> None:
        flag = env_flag("BILLING_STRANGLER_MODE")
        monkeypatch.delenv("BILLING_STRANGLER_MODE", raising=False)

        assert await flag() == "old"
        monkeypatch.setenv("BILLING_STRANGLER_MODE", "new-compare")
        assert await flag() == "new-compare"

    @pytest.mark.asyncio
    async def test_env_flag_default(self, monkeypatch) -> None:
        monkeypatch.delenv("BILLING_STRANGLER_MODE", raising=False)

        assert await env_flag("BILLING_STRANGLER_MODE", default="new")() == "new"

    @pytest.mark.asyncio
    async def test_settings_flag_with_explicit_settings(self) -> None:
        flag = settings_flag(StranglerSettings(default_mode="old-compare"))

        assert await flag() == "old-compare"

    @pytest.mark.asyncio
    async def test_settings_flag_rereads_environment(self, monkeypatch) -> None:
        flag = settings_flag()
        monkeypatch.setenv("STRANGLER_DEFAULT_MODE", "new")
        assert await flag() == "new"
        monkeypatch.setenv("STRANGLER_DEFAULT_MODE", "old")
        assert await flag() == "old"

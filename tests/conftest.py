"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer TRANSFER_BRIDGE_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("TRANSFER_BRIDGE_"):
            monkeypatch.delenv(name, raising=False)

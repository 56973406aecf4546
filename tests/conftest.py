"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _clear_pricewise_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove PRICEWISE_* variables before each test.

    A developer's .env (loaded by the CLI module on import) would otherwise
    leak into config and CLI tests.
    """
    for key in list(os.environ):
        if key.startswith("PRICEWISE_"):
            monkeypatch.delenv(key, raising=False)

"""Fixtures shared by every test module."""

import os

import pytest

from dinostore.config import get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Isolate Settings from the caller's environment and .env file."""
    for name in list(os.environ):
        if name.startswith("DINO_") or name == "DATABASE_URL":
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()

# tests/conftest.py
import random

import pytest

from backend.config import CONFIG_ENV_VAR


@pytest.fixture
def rng():
    """Seeded generator so generated problems are reproducible."""
    return random.Random(1234)


@pytest.fixture
def no_config(monkeypatch, tmp_path):
    """Point the config lookup at a path that does not exist."""
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.yaml"))
    return tmp_path

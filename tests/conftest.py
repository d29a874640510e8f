"""Fixtures for the offline unit tests (no backend required)."""

import pytest

from e2e import api, conftest, profiles
from e2e.shared_data import reset_shared_data

TEST_API_BASE = "http://api.test/api"

CREDENTIAL_VARS = [
    f"TEST_{role}_{key}"
    for role in ("STUDENT", "TEACHER", "GUARDIAN")
    for key in ("EMAIL", "USERNAME", "PASSWORD")
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point shared data at a temp file and reset process-wide state."""
    data_file = tmp_path / "test-data.json"
    monkeypatch.setenv("TEST_DATA_FILE", str(data_file))
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(conftest, "API_BASE", TEST_API_BASE)
    monkeypatch.setattr(conftest, "LOG_LEVEL", "info")
    monkeypatch.setattr(api, "_session", None)

    reset_shared_data()
    profiles.clear_all()
    yield data_file
    reset_shared_data()
    profiles.clear_all()


@pytest.fixture
def data_file(isolated_environment):
    return isolated_environment

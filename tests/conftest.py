"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from single_app_instance.config import runtime
from single_app_instance.fingerprint import ProcessFingerprint
from single_app_instance.instance_detector import SingleAppInstance
from tests.helpers.instance_fakes import CURRENT_PID, FakeProcessTable, make_fingerprint


@pytest.fixture(autouse=True)
def isolated_runtime_config(monkeypatch):
    """Keep developer .env files and SINGLE_APP_INSTANCE_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("SINGLE_APP_INSTANCE_") or name == "LOG_APPEND":
            monkeypatch.delenv(name, raising=False)
    runtime._DEFAULT_VALUES = {}
    yield
    runtime._DEFAULT_VALUES = None


@pytest.fixture
def process_table() -> FakeProcessTable:
    return FakeProcessTable()


@pytest.fixture
def pid_file_path(tmp_path) -> Path:
    return tmp_path / "appdata" / ".SingleAppInstance.pid"


@pytest.fixture
def own_fingerprint() -> ProcessFingerprint:
    return make_fingerprint(pid=CURRENT_PID)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def detector(pid_file_path, process_table, own_fingerprint, sleeps) -> SingleAppInstance:
    """Detector wired to a temp pid file, a fake process table and no real sleeping."""
    return SingleAppInstance(
        pid_file_path,
        process_table=process_table,
        sleep=sleeps.append,
        current_pid=lambda: CURRENT_PID,
        capture=lambda: own_fingerprint,
    )

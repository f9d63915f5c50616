from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


@pytest.fixture
def backend_module(monkeypatch):
    monkeypatch.setenv("ALLOW_ANON", "false")
    # Keep CI offline; the remote client has its own transport-level tests.
    monkeypatch.setenv("MEDIKAH_SCHEDULE_MODE", "simulated")
    monkeypatch.setenv("MEDIKAH_SCHEDULER_RESET_DELAY_MS", "0")
    monkeypatch.setenv("MEDIKAH_DEFAULT_TIMEZONE", "UTC")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _make(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}

    return _make

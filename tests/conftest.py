"""
Shared fixtures for the dictation engine tests
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.config import ConfidenceSettings


@pytest.fixture
def reference_time():
    return datetime(2024, 3, 15, 9, 5)


@pytest.fixture
def confidence():
    return ConfidenceSettings()


@pytest.fixture
def client():
    from app.main import app, sessions

    with TestClient(app) as test_client:
        yield test_client
    sessions.clear()

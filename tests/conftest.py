"""Shared fixtures for fogimport tests."""

from __future__ import annotations

import pytest

from fogimport.report import RecordingReporter
from fogimport.state import MapState


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def map_state():
    return MapState()


@pytest.fixture
def reporter():
    return RecordingReporter()

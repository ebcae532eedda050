"""Shared fixtures for the wren test suite."""

import pytest
from support import RecordingHost


@pytest.fixture
def log() -> list[str]:
    return []


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()

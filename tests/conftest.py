"""Global pytest configuration and fixtures.

Provides an in-memory lock store and a controllable clock so lock
scenarios can be played out without Redis or real waiting.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tasklock.execution import set_task_lock
from tasklock.store.memory import MemoryLockStore
from tests.fakes import FakeClock, FakeProcesses


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: tests that need a running Redis")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def processes() -> FakeProcesses:
    """Pids 100 and 200 are running."""
    return FakeProcesses(100, 200)


@pytest.fixture
def store() -> MemoryLockStore:
    return MemoryLockStore()


@pytest.fixture(autouse=True)
def reset_task_lock() -> Iterator[None]:
    """Never leak a process-wide task lock between tests."""
    yield
    set_task_lock(None)

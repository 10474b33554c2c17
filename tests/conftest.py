"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mlops.run_registry import FixedClock, RunRepository, SessionFactory  # noqa: E402

EPOCH = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached settings and the process-wide engine around each test."""
    import mlops.db.engine as engine_module
    from mlops.settings import get_settings

    original_engine = engine_module._engine
    engine_module._engine = None
    get_settings.cache_clear()

    yield

    if engine_module._engine is not None:
        engine_module._engine.dispose()
    engine_module._engine = original_engine
    get_settings.cache_clear()


@pytest.fixture
def clock():
    """A clock that moves one second forward on every read."""
    return FixedClock(EPOCH, step=timedelta(seconds=1))


@pytest.fixture
def session_factory():
    factory = SessionFactory.from_url("sqlite://")
    factory.create_schema()
    yield factory
    factory.dispose()


@pytest.fixture
def repository(session_factory, clock):
    return RunRepository(session_factory, clock=clock)

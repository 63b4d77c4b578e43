"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Минимальное окружение для тестов: in-memory база и политики по умолчанию
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PLACEMENT_POLICY", "bubble_up")
os.environ.setdefault("MIRROR_TO_RECRUITER", "1")
os.environ.setdefault("EARNINGS_FORMULA", "payline")
os.environ.setdefault("FLAT_EARNINGS_PER_MEMBER", "30")

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import datetime, timezone

import pytest

from matrix_system.engine import MatrixEngine
from matrix_system.events.event_bus import EventBus
from matrix_system.utils.time_machine import TimeMachine


@pytest.fixture
def clock():
    """Virtual clock frozen at a known instant."""
    return TimeMachine(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def make_engine(clock, bus):
    """Factory for engines sharing the test clock and bus."""
    engines = []

    def factory(**kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("eventBus", bus)
        engine = MatrixEngine(databaseUrl="sqlite://", **kwargs)
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.close()


@pytest.fixture
def engine(make_engine):
    """Engine with the default bubble-up policy and recruiter mirroring."""
    return make_engine(policy="bubble_up", mirrorToRecruiter=True)


@pytest.fixture
def root(engine):
    return engine.addMember("Root", email="root@example.com")

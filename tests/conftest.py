"""
Shared fixtures for the prioritizer test suite.

Run:  pytest tests/ -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from prioritizer.core.prioritizer import TaskPrioritizer
from prioritizer.models.task import Task
from prioritizer.models.user_context import UserContext

# Wednesday 27 August 2025, 10:00 UTC
NOW = datetime(2025, 8, 27, 10, 0, tzinfo=timezone.utc)
# Saturday 30 August 2025, 10:00 UTC
SATURDAY = datetime(2025, 8, 30, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def engine():
    return TaskPrioritizer()


@pytest.fixture
def context():
    return UserContext()


@pytest.fixture
def make_task():
    """Build a Task from keyword fields; `due_in_hours` is relative to NOW."""

    def _make(due_in_hours=None, **fields):
        if due_in_hours is not None:
            fields["dueDate"] = NOW + timedelta(hours=due_in_hours)
        fields.setdefault("title", "Plain")
        return Task(**fields)

    return _make

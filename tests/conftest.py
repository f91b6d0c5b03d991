"""Pytest configuration and shared fixtures."""
import uuid

import pytest

from remute import Remute, set_default_engine
from models import Department, Employee, Organization


@pytest.fixture(autouse=True)
def reset_default_engine():
    """Give every test a fresh default engine."""
    set_default_engine(None)
    yield
    set_default_engine(None)


@pytest.fixture
def engine():
    """Fresh engine with its own caches and handlers."""
    return Remute()


@pytest.fixture
def manager():
    """Department manager."""
    return Employee(uuid.uuid4(), 'developer', 'manager')


@pytest.fixture
def organization(manager):
    """Organization with one department and no employees."""
    return Organization('organization 1', Department('department 1', manager, None))


@pytest.fixture
def employees():
    """Three employees in a list."""
    return [
        Employee(uuid.uuid4(), 'Emp', '1'),
        Employee(uuid.uuid4(), 'Emp', '2'),
        Employee(uuid.uuid4(), 'Emp', '3'),
    ]


@pytest.fixture
def recorded_changes(engine):
    """Change notifications received by ``engine``, in order."""
    changes = []
    engine.on_change(lambda source, target, value, affected: changes.append((source, target, value, affected)))
    return changes

# conftest.py

import os
import tempfile

import pytest

# Point the process-wide database at a throwaway file BEFORE importing the
# app, since app.main creates tables at import time.
_db_dir = tempfile.mkdtemp(prefix="student_registry_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'app.db')}"

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import create_tables, make_engine
from app.main import app
from app.services.registry import StudentPayload, StudentRegistry, get_registry


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database file per test"""
    test_engine = make_engine(f"sqlite:///{tmp_path / 'registry.db'}")
    create_tables(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def registry(engine):
    """Registry isolated from the process-wide one"""
    return StudentRegistry(sessionmaker(autoflush=False, expire_on_commit=False, bind=engine))


@pytest.fixture
def broken_registry(tmp_path):
    """Registry over a database whose students table was never created"""
    bare_engine = make_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    yield StudentRegistry(sessionmaker(autoflush=False, expire_on_commit=False, bind=bare_engine))
    bare_engine.dispose()


@pytest.fixture
def client(registry):
    """HTTP client whose routes use the isolated registry"""
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alice_json():
    """Request body for the reference student"""
    return {
        "name": "Alice",
        "dateBirth": "2010-01-01",
        "dateAdmission": "2020-01-01",
        "course": "Math",
        "courseType": "Full",
        "location": "Campus A",
        "parent": "Bob",
        "parentNumber": 12345,
    }


@pytest.fixture
def alice_payload(alice_json):
    return StudentPayload(**alice_json)


@pytest.fixture
def make_payload(alice_json):
    """Build a payload from the reference student with some fields changed"""
    def _make(**overrides):
        data = dict(alice_json)
        data.update(overrides)
        return StudentPayload(**data)
    return _make

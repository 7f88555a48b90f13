"""Shared fixtures; every test gets its own record document under tmp_path."""

import pytest

from services.document_store import JsonDocumentStore
from services.record_store import RecordStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "database.json"


@pytest.fixture
def backing(db_path):
    return JsonDocumentStore(db_path)


@pytest.fixture
def store(backing):
    return RecordStore(backing)

# tests/conftest.py
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# module-level app in dealscope.api.http opens DB_URI on import
os.environ.setdefault("DEALSCOPE_DB_URI", f"sqlite:///{tempfile.mkdtemp()}/dealscope-test.db")

from dealscope.api.http import create_app  # noqa: E402


@pytest.fixture
def db_uri(tmp_path):
    return f"sqlite:///{tmp_path / 'dealscope.db'}"


@pytest.fixture
def client(db_uri):
    return TestClient(create_app(db_uri))

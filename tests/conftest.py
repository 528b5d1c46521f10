import os
import sys
import tempfile

import pytest

# Ensure project root is on sys.path for `import ndawonga`, `import api`, etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Keep the module-level app in api.server away from the real database.
os.environ["DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="ndawonga-tests-"), "app.sqlite3")
os.environ.setdefault("REQUEST_LOGS", "1")

from ndawonga.config import Settings  # noqa: E402
from ndawonga.db import init_db  # noqa: E402


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "site.sqlite3")
    init_db(path)
    return path


@pytest.fixture
def settings(db_path):
    return Settings(DB_PATH=db_path)


@pytest.fixture
def client(settings):
    from fastapi.testclient import TestClient

    from api.server import create_app

    return TestClient(create_app(settings))

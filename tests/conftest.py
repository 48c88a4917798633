import pytest

from study_planner.db import init_db
from study_planner.models import Topic


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture
def db(tmp_db):
    """Temporary database with the schema created."""
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def topics():
    return [
        Topic(id="law", name="Constitutional Law", subject="Law", weight=50, estimated_hours=10, difficulty="easy"),
        Topic(id="math", name="Statistics", subject="Math", weight=100, estimated_hours=20, difficulty="hard"),
        Topic(id="port", name="Grammar", subject="Portuguese", weight=60, estimated_hours=8, difficulty="medium"),
    ]

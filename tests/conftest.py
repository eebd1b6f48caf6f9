import pytest

from study_planner.db import init_db
from study_planner.importer import import_syllabus

SAMPLE_SYLLABUS = {
    "subjects": [
        {
            "name": "Physics",
            "color": "#E4572E",
            "difficulty": "weak",
            "chapters": [
                {"name": "Kinematics", "topics": ["Displacement", "Velocity", "Acceleration"]},
                {"name": "Dynamics", "topics": [{"name": "Newton's laws", "content": "F = ma"}, "Friction"]},
            ],
        },
        {
            "name": "Chemistry",
            "chapters": [
                {"name": "Atoms", "topics": ["Atomic structure", "Isotopes"]},
            ],
        },
    ]
}


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture
def syllabus_db(tmp_db):
    """A database holding SAMPLE_SYLLABUS for user 'alice'."""
    init_db(tmp_db)
    import_syllabus(tmp_db, "alice", SAMPLE_SYLLABUS)
    return tmp_db

# tests/test_importer.py
import json

import pytest

from study_planner.db import get_connection, init_db
from study_planner.exceptions import InvalidInputError
from study_planner.importer import import_file, import_syllabus, read_syllabus

YAML_SYLLABUS = """
subjects:
  - name: Mathematics
    color: "#3A86FF"
    difficulty: weak
    chapters:
      - name: Algebra
        topics:
          - Linear equations
          - name: Quadratics
            content: Factorising and the formula
      - name: Geometry
        topics: [Triangles]
"""


def test_read_yaml_file(tmp_path):
    f = tmp_path / "syllabus.yaml"
    f.write_text(YAML_SYLLABUS)
    data = read_syllabus(str(f))
    assert data["subjects"][0]["name"] == "Mathematics"


def test_read_json_file(tmp_path):
    f = tmp_path / "syllabus.json"
    f.write_text(json.dumps({"subjects": [{"name": "Art", "chapters": []}]}))
    assert read_syllabus(str(f))["subjects"][0]["name"] == "Art"


def test_read_unsupported_format(tmp_path):
    f = tmp_path / "syllabus.pdf"
    f.write_text("not really a pdf")
    with pytest.raises(InvalidInputError):
        read_syllabus(str(f))


def test_read_malformed_yaml(tmp_path):
    f = tmp_path / "broken.yml"
    f.write_text("subjects: [unclosed")
    with pytest.raises(InvalidInputError):
        read_syllabus(str(f))


def test_read_non_mapping(tmp_path):
    f = tmp_path / "list.json"
    f.write_text("[1, 2, 3]")
    with pytest.raises(InvalidInputError):
        read_syllabus(str(f))


def test_import_file(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "syllabus.yaml"
    f.write_text(YAML_SYLLABUS)
    counts = import_file(tmp_db, "alice", str(f))
    assert counts == {"subjects": 1, "chapters": 2, "topics": 3}
    conn = get_connection(tmp_db)
    subject = conn.execute("SELECT * FROM subjects").fetchone()
    assert subject["color"] == "#3A86FF"
    assert subject["difficulty"] == "weak"
    topics = conn.execute("SELECT * FROM topics ORDER BY id").fetchall()
    conn.close()
    assert [t["name"] for t in topics] == ["Linear equations", "Quadratics", "Triangles"]
    assert [t["order_index"] for t in topics] == [0, 1, 0]
    assert topics[1]["content"] == "Factorising and the formula"
    assert all(t["status"] == "pending" for t in topics)
    assert all(t["user_id"] == "alice" for t in topics)


def test_import_default_color_and_difficulty(syllabus_db):
    conn = get_connection(syllabus_db)
    row = conn.execute("SELECT color, difficulty FROM subjects WHERE name = 'Chemistry'").fetchone()
    conn.close()
    assert row["color"] == "#18206F"
    assert row["difficulty"] == "medium"


@pytest.mark.parametrize("data", [
    {},
    {"subjects": []},
    {"subjects": "Physics"},
    {"subjects": [{"chapters": []}]},
    {"subjects": [{"name": "P", "difficulty": "hard", "chapters": []}]},
    {"subjects": [{"name": "P", "chapters": [{"topics": ["x"]}]}]},
    {"subjects": [{"name": "P", "chapters": [{"name": "C", "topics": [{"content": "no name"}]}]}]},
])
def test_import_rejects_malformed(tmp_db, data):
    init_db(tmp_db)
    with pytest.raises(InvalidInputError):
        import_syllabus(tmp_db, "alice", data)


def test_failed_import_leaves_nothing_behind(tmp_db):
    init_db(tmp_db)
    data = {"subjects": [
        {"name": "Good", "chapters": [{"name": "C", "topics": ["t"]}]},
        {"name": "Bad", "chapters": [{"name": "C", "topics": [42]}]},
    ]}
    with pytest.raises(InvalidInputError):
        import_syllabus(tmp_db, "alice", data)
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM subjects").fetchone()[0] == 0
    assert conn.execute("SELECT COUNT(*) FROM topics").fetchone()[0] == 0
    conn.close()

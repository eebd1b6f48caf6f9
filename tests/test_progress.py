# tests/test_progress.py
from datetime import date

from study_planner.db import get_connection
from study_planner.mistakes import record_mistake
from study_planner.plan import save_profile
from study_planner.progress import get_calendar, get_study_stats, get_subject_progress
from study_planner.quiz import submit_quiz_result

TODAY = date(2025, 1, 1)


def _ids(db_path):
    conn = get_connection(db_path)
    rows = conn.execute("SELECT id, name FROM topics").fetchall()
    conn.close()
    return {r["name"]: r["id"] for r in rows}


def test_subject_progress_empty(syllabus_db):
    progress = get_subject_progress(syllabus_db, "alice")
    assert [(p["name"], p["total"], p["done"], p["percent"]) for p in progress] == [
        ("Physics", 5, 0, 0),
        ("Chemistry", 2, 0, 0),
    ]


def test_subject_progress_counts_statuses(syllabus_db):
    ids = _ids(syllabus_db)
    submit_quiz_result(syllabus_db, "alice", ids["Velocity"], 90, "high", today=TODAY)
    submit_quiz_result(syllabus_db, "alice", ids["Friction"], 55, "low", today=TODAY)
    submit_quiz_result(syllabus_db, "alice", ids["Isotopes"], 10, "low", today=TODAY)
    physics, chemistry = get_subject_progress(syllabus_db, "alice")
    assert (physics["done"], physics["strong"], physics["needs_revision"], physics["weak"]) == (2, 1, 1, 0)
    assert physics["percent"] == 40
    assert (chemistry["done"], chemistry["weak"], chemistry["percent"]) == (1, 1, 50)
    assert (physics["difficulty"], chemistry["difficulty"]) == ("weak", "medium")


def test_subject_without_topics(syllabus_db):
    conn = get_connection(syllabus_db)
    conn.execute("INSERT INTO subjects (user_id, name) VALUES ('alice', 'Biology')")
    conn.commit()
    conn.close()
    biology = get_subject_progress(syllabus_db, "alice")[-1]
    assert (biology["name"], biology["total"], biology["done"], biology["percent"]) == ("Biology", 0, 0, 0)


def test_study_stats(syllabus_db):
    save_profile(syllabus_db, "alice")
    ids = _ids(syllabus_db)
    submit_quiz_result(syllabus_db, "alice", ids["Velocity"], 90, "high", today=TODAY)
    submit_quiz_result(syllabus_db, "alice", ids["Isotopes"], 10, "low", today=TODAY)
    record_mistake(syllabus_db, "alice", ids["Isotopes"], "Q", "a", "b")

    stats = get_study_stats(syllabus_db, "alice", today=date(2025, 1, 2))
    assert stats["topics_total"] == 7
    assert stats["topics_done"] == 2
    assert stats["percent_complete"] == 29
    assert stats["minutes_studied"] == 60
    assert stats["avg_quiz_score"] == 50.0
    assert stats["current_streak"] == 1
    assert stats["revisions_due"] == 1
    assert stats["unreviewed_mistakes"] == 1


def test_study_stats_without_profile(syllabus_db):
    stats = get_study_stats(syllabus_db, "alice", today=TODAY)
    assert stats["current_streak"] == 0
    assert stats["minutes_studied"] == 0


def test_calendar_day_status(syllabus_db):
    ids = _ids(syllabus_db)
    submit_quiz_result(syllabus_db, "alice", ids["Velocity"], 60, "low", today=TODAY)
    submit_quiz_result(syllabus_db, "alice", ids["Friction"], 60, "low", today=date(2025, 1, 4))

    days = get_calendar(syllabus_db, "alice", TODAY, date(2025, 1, 10))
    assert days["2025-01-01"]["status"] == "completed"
    # Velocity's +3 revision is still open; Friction was studied that day
    assert days["2025-01-04"]["status"] == "partial"
    assert [t["task_type"] for t in days["2025-01-04"]["tasks"]] == ["revision", "study"]
    assert days["2025-01-07"]["status"] == "pending"
    assert [t["topic_name"] for t in days["2025-01-08"]["tasks"]] == ["Velocity"]
    assert "2025-01-11" not in days

# tests/test_plan.py
from datetime import date

import pytest

from study_planner.db import get_connection, init_db
from study_planner.exceptions import InvalidInputError
from study_planner.plan import (
    days_until, get_plan_topics, get_profile, get_todays_plan, pull_next_topic, save_profile,
)
from study_planner.quiz import submit_quiz_result

TODAY = date(2025, 1, 1)


def test_save_and_get_profile(tmp_db):
    init_db(tmp_db)
    assert get_profile(tmp_db, "alice") is None
    profile = save_profile(tmp_db, "alice", name="Alice", daily_study_hours=3, exam_date="2025-03-01")
    assert profile.name == "Alice"
    assert profile.daily_study_hours == 3
    assert profile.exam_date == "2025-03-01"
    assert profile.current_streak == 0


def test_save_profile_updates_in_place(tmp_db):
    init_db(tmp_db)
    save_profile(tmp_db, "alice", daily_study_hours=3, exam_date="2025-03-01")
    profile = save_profile(tmp_db, "alice", daily_study_hours=5)
    assert profile.daily_study_hours == 5
    assert profile.exam_date is None
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM profiles").fetchone()[0] == 1
    conn.close()


@pytest.mark.parametrize("hours", [0, -2, 1.5, "3", True])
def test_save_profile_rejects_bad_hours(tmp_db, hours):
    init_db(tmp_db)
    with pytest.raises(InvalidInputError):
        save_profile(tmp_db, "alice", daily_study_hours=hours)


def test_save_profile_rejects_bad_exam_date(tmp_db):
    init_db(tmp_db)
    with pytest.raises(InvalidInputError):
        save_profile(tmp_db, "alice", exam_date="next tuesday")


def test_get_plan_topics_in_chapter_order(syllabus_db):
    topics = get_plan_topics(syllabus_db, "alice")
    assert len(topics) == 7
    # chapter order_index first, so each subject's first chapter comes before any second chapter
    assert [t.topic_name for t in topics[:5]] == [
        "Displacement", "Velocity", "Acceleration", "Atomic structure", "Isotopes",
    ]
    assert topics[0].subject_name == "Physics"
    assert topics[0].subject_color == "#E4572E"
    assert topics[0].chapter_name == "Kinematics"
    assert all(t.is_pending for t in topics)


def test_get_plan_topics_isolated_per_user(syllabus_db):
    assert get_plan_topics(syllabus_db, "bob") == []


def test_days_until():
    assert days_until(None, TODAY) is None
    assert days_until("2025-01-31", TODAY) == 30
    assert days_until("2024-12-01", TODAY) == 0


def test_todays_plan_without_profile_uses_default_hours(syllabus_db):
    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    assert plan.profile is None
    assert plan.allocation.max_topics_today == 4
    assert len(plan.topics) == 4
    assert plan.days_until_exam is None


def test_todays_plan_uses_profile_hours(syllabus_db):
    save_profile(syllabus_db, "alice", daily_study_hours=1, exam_date="2025-01-11")
    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    assert plan.allocation.max_topics_today == 2
    assert {b.subject_name for b in plan.allocation.breakdown} == {"Physics", "Chemistry"}
    assert plan.days_until_exam == 10


def test_todays_plan_appends_topics_completed_today(syllabus_db):
    save_profile(syllabus_db, "alice", daily_study_hours=1)
    first = get_todays_plan(syllabus_db, "alice", TODAY).allocation.topics[0]
    submit_quiz_result(syllabus_db, "alice", first.topic_id, 90, "high", today=TODAY)

    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    assert first.topic_id not in plan.allocation.topic_ids
    assert [t.topic_id for t in plan.completed_today] == [first.topic_id]
    assert plan.topics[-1].topic_id == first.topic_id
    assert plan.topics[-1].status == "strong"

    tomorrow = get_todays_plan(syllabus_db, "alice", date(2025, 1, 2))
    assert tomorrow.completed_today == []


def test_pull_next_topic_adds_first_unplanned_pending(syllabus_db):
    save_profile(syllabus_db, "alice", daily_study_hours=1)
    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    assert [t.topic_name for t in plan.topics] == ["Displacement", "Atomic structure"]
    all_topics = get_plan_topics(syllabus_db, "alice")

    assert pull_next_topic(plan, all_topics).topic_name == "Velocity"
    assert pull_next_topic(plan, all_topics).topic_name == "Acceleration"
    assert [t.topic_name for t in plan.topics] == [
        "Displacement", "Atomic structure", "Velocity", "Acceleration",
    ]


def test_pull_next_topic_skips_studied_topics(syllabus_db):
    save_profile(syllabus_db, "alice", daily_study_hours=1)
    velocity = next(t for t in get_plan_topics(syllabus_db, "alice") if t.topic_name == "Velocity")
    submit_quiz_result(syllabus_db, "alice", velocity.topic_id, 70, "medium", today=TODAY)
    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    assert pull_next_topic(plan, get_plan_topics(syllabus_db, "alice")).topic_name == "Acceleration"


def test_pull_next_topic_none_left(syllabus_db):
    save_profile(syllabus_db, "alice", daily_study_hours=8)
    plan = get_todays_plan(syllabus_db, "alice", TODAY)
    # Physics 4 + Chemistry 2 leaves Friction unplanned
    assert plan.allocation.total == 6
    all_topics = get_plan_topics(syllabus_db, "alice")
    assert pull_next_topic(plan, all_topics).topic_name == "Friction"
    assert pull_next_topic(plan, all_topics) is None
    assert [t.topic_name for t in plan.pulled] == ["Friction"]

"""Profile settings and today's study plan."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from loguru import logger

from study_planner.allocator import DailyAllocation, allocate
from study_planner.config import DEFAULT_DAILY_HOURS
from study_planner.db import get_connection
from study_planner.exceptions import InvalidInputError
from study_planner.models import PlanTopic, Profile

PLAN_TOPICS_QUERY = """SELECT t.id as topic_id, t.name as topic_name, t.status, t.confidence,
    c.id as chapter_id, c.name as chapter_name,
    s.id as subject_id, s.name as subject_name, s.color as subject_color
FROM topics t
JOIN chapters c ON t.chapter_id = c.id
JOIN subjects s ON c.subject_id = s.id
WHERE t.user_id = ?"""


@dataclass
class TodaysPlan:
    allocation: DailyAllocation
    completed_today: list[PlanTopic] = field(default_factory=list)
    pulled: list[PlanTopic] = field(default_factory=list)
    profile: Optional[Profile] = None
    days_until_exam: Optional[int] = None

    @property
    def topics(self) -> list[PlanTopic]:
        """Pending selection, extra topics pulled in, then topics finished today."""
        return self.allocation.topics + self.pulled + self.completed_today


def get_profile(db_path: str, user_id: str) -> Profile | None:
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT user_id, name, daily_study_hours, exam_date, current_streak, last_study_date
        FROM profiles WHERE user_id = ?""",
        (user_id,),
    ).fetchone()
    conn.close()
    return Profile(**dict(row)) if row else None


def save_profile(
    db_path: str,
    user_id: str,
    name: str = "Student",
    daily_study_hours: int = DEFAULT_DAILY_HOURS,
    exam_date: str | None = None,
) -> Profile:
    """Create or update a profile's settings. Streak fields are left alone."""
    if isinstance(daily_study_hours, bool) or not isinstance(daily_study_hours, int) or daily_study_hours < 1:
        raise InvalidInputError(f"daily_study_hours must be a whole number of at least 1, got {daily_study_hours!r}")
    if exam_date:
        try:
            date.fromisoformat(exam_date)
        except ValueError as e:
            raise InvalidInputError(f"exam_date must be YYYY-MM-DD, got {exam_date!r}") from e
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO profiles (user_id, name, daily_study_hours, exam_date) VALUES (?, ?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET name=excluded.name,
            daily_study_hours=excluded.daily_study_hours, exam_date=excluded.exam_date""",
        (user_id, name, daily_study_hours, exam_date or None),
    )
    conn.commit()
    conn.close()
    logger.info(f"Saved profile for {user_id}: {daily_study_hours}h/day, exam {exam_date or 'unset'}")
    return get_profile(db_path, user_id)


def get_plan_topics(db_path: str, user_id: str) -> list[PlanTopic]:
    """All of a user's topics in chapter order, then topic order."""
    conn = get_connection(db_path)
    rows = conn.execute(
        PLAN_TOPICS_QUERY + " ORDER BY c.order_index, c.id, t.order_index, t.id",
        (user_id,),
    ).fetchall()
    conn.close()
    return [PlanTopic(**dict(r)) for r in rows]


def get_completed_today(db_path: str, user_id: str, today: date) -> list[PlanTopic]:
    conn = get_connection(db_path)
    rows = conn.execute(
        PLAN_TOPICS_QUERY + """ AND t.id IN (
            SELECT topic_id FROM study_tasks
            WHERE user_id = ? AND scheduled_date = ? AND task_type = 'study' AND is_completed = 1
        ) ORDER BY c.order_index, c.id, t.order_index, t.id""",
        (user_id, user_id, today.isoformat()),
    ).fetchall()
    conn.close()
    return [PlanTopic(**dict(r)) for r in rows if r["status"] not in (None, "", "pending")]


def days_until(exam_date: str | None, today: date) -> int | None:
    if not exam_date:
        return None
    return max(0, (date.fromisoformat(exam_date) - today).days)


def get_todays_plan(db_path: str, user_id: str, today: date | None = None) -> TodaysPlan:
    today = today or date.today()
    profile = get_profile(db_path, user_id)
    hours = profile.daily_study_hours if profile else DEFAULT_DAILY_HOURS
    allocation = allocate(get_plan_topics(db_path, user_id), hours)
    return TodaysPlan(
        allocation=allocation,
        completed_today=get_completed_today(db_path, user_id, today),
        profile=profile,
        days_until_exam=days_until(profile.exam_date, today) if profile else None,
    )


def pull_next_topic(plan: TodaysPlan, all_topics: list[PlanTopic]) -> PlanTopic | None:
    """Add the first pending topic not already on today's list.

    Lets a student study beyond the daily budget. Returns None when every
    pending topic is already planned.
    """
    planned = {t.topic_id for t in plan.topics}
    for topic in all_topics:
        if topic.is_pending and topic.topic_id not in planned:
            plan.pulled.append(topic)
            logger.info(f"Pulled extra topic {topic.topic_id} ({topic.topic_name}) into today's plan")
            return topic
    return None

"""Quiz result pipeline: classify, save, schedule revisions, bump streak."""
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from loguru import logger

from study_planner.db import get_connection
from study_planner.exceptions import (
    ProfileNotFoundError, RevisionSchedulingError, StreakUpdateError, TopicNotFoundError,
)
from study_planner.mastery import classify
from study_planner.revision import complete_due_revisions_for_topic, schedule_revisions
from study_planner.streak import update_streak

STUDY_MINUTES = 30


@dataclass
class QuizOutcome:
    topic_id: int
    status: str
    revisions_scheduled: Optional[int] = None
    streak: Optional[int] = None


def _save_topic_result(db_path: str, user_id: str, topic_id: int, score: int, confidence: str,
                       status: str, today: date) -> None:
    now = datetime.now().isoformat()
    conn = get_connection(db_path)
    try:
        cursor = conn.execute(
            """UPDATE topics SET status = ?, confidence = ?, last_quiz_score = ?, completed_at = ?
            WHERE id = ? AND user_id = ?""",
            (status, confidence, score, now, topic_id, user_id),
        )
        if cursor.rowcount == 0:
            raise TopicNotFoundError(topic_id, user_id)
        conn.execute(
            """INSERT OR IGNORE INTO study_tasks
            (user_id, topic_id, scheduled_date, duration_minutes, task_type, is_completed, completed_at)
            VALUES (?, ?, ?, ?, 'study', 1, ?)""",
            (user_id, topic_id, today.isoformat(), STUDY_MINUTES, now),
        )
        conn.execute(
            """INSERT INTO quiz_attempts (user_id, topic_id, score, confidence, status, completed_at)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (user_id, topic_id, score, confidence, status, now),
        )
        closed = complete_due_revisions_for_topic(conn, user_id, topic_id, today)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    if closed:
        logger.info(f"Topic {topic_id}: closed {closed} due revision task(s)")


def submit_quiz_result(db_path: str, user_id: str, topic_id: int, score: int, confidence: str,
                       today: date | None = None) -> QuizOutcome:
    """Apply a finished quiz to a topic and return what changed.

    The topic update, the revision scheduling and the streak are separate
    writes. If scheduling fails the topic keeps its new status and a
    RevisionSchedulingError reports the partial outcome; if the streak
    fails a StreakUpdateError carries the status and revision count.
    """
    today = today or date.today()
    status = classify(score, confidence)
    logger.debug(f"Topic {topic_id}: score={score} confidence={confidence} -> {status}")

    _save_topic_result(db_path, user_id, topic_id, score, confidence, status, today)
    outcome = QuizOutcome(topic_id=topic_id, status=status)
    logger.info(f"Topic {topic_id} saved as {status}")

    try:
        scheduled = schedule_revisions(db_path, user_id, topic_id, status, today)
    except Exception as e:
        logger.error(f"Topic {topic_id}: revision scheduling failed: {e}")
        raise RevisionSchedulingError(outcome, e) from e

    outcome = replace(outcome, revisions_scheduled=scheduled)
    try:
        streak = update_streak(db_path, user_id, today)
    except ProfileNotFoundError:
        logger.warning(f"No profile for {user_id}, streak not tracked")
        streak = None
    except Exception as e:
        logger.error(f"Topic {topic_id}: streak update failed: {e}")
        raise StreakUpdateError(outcome, e) from e
    return replace(outcome, streak=streak)


def get_quiz_history(db_path: str, user_id: str, topic_id: int | None = None) -> list[dict]:
    query = """SELECT qa.*, t.name as topic_name FROM quiz_attempts qa
        JOIN topics t ON qa.topic_id = t.id WHERE qa.user_id = ?"""
    params: tuple = (user_id,)
    if topic_id is not None:
        query += " AND qa.topic_id = ?"
        params += (topic_id,)
    conn = get_connection(db_path)
    rows = conn.execute(query + " ORDER BY qa.completed_at DESC, qa.id DESC", params).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_average_quiz_score(db_path: str, user_id: str) -> float:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT COUNT(*) as total, AVG(score) as avg FROM quiz_attempts WHERE user_id = ?",
        (user_id,),
    ).fetchone()
    conn.close()
    if row["total"] == 0:
        return 0.0
    return round(row["avg"], 1)

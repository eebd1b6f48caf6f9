"""Revision scheduling driven by mastery status."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from loguru import logger

from study_planner.db import get_connection
from study_planner.exceptions import InvalidInputError

REVISION_MINUTES = 20

# status -> ((days ahead, require quiz), ...)
REVISION_SCHEDULE = {
    "strong": ((7, False), (21, False)),
    "needs_revision": ((3, False), (7, False)),
    "weak": ((1, True),),
}


@dataclass(frozen=True)
class RevisionCandidate:
    days_ahead: int
    require_quiz: bool
    scheduled_date: date
    duration_minutes: int = REVISION_MINUTES
    task_type: str = "revision"


def schedule(status: str, today: date) -> list[RevisionCandidate]:
    """Return the revision tasks a topic with this status should get."""
    if status not in REVISION_SCHEDULE:
        raise InvalidInputError(f"No revision schedule for status {status!r}")
    return [
        RevisionCandidate(
            days_ahead=days,
            require_quiz=require_quiz,
            scheduled_date=today + timedelta(days=days),
        )
        for days, require_quiz in REVISION_SCHEDULE[status]
    ]


def filter_new(candidates: list[RevisionCandidate], existing_dates) -> list[RevisionCandidate]:
    """Drop candidates whose date already has a revision task.

    ``existing_dates`` may hold ``date`` objects or ISO strings.
    """
    taken = {d if isinstance(d, str) else d.isoformat() for d in existing_dates}
    fresh = []
    for candidate in candidates:
        key = candidate.scheduled_date.isoformat()
        if key in taken:
            continue
        taken.add(key)
        fresh.append(candidate)
    return fresh


def get_existing_revision_dates(db_path: str, user_id: str, topic_id: int, dates: list[str]) -> set[str]:
    if not dates:
        return set()
    placeholders = ", ".join("?" for _ in dates)
    conn = get_connection(db_path)
    rows = conn.execute(
        f"""SELECT scheduled_date FROM study_tasks
        WHERE user_id = ? AND topic_id = ? AND task_type = 'revision'
        AND scheduled_date IN ({placeholders})""",
        (user_id, topic_id, *dates),
    ).fetchall()
    conn.close()
    return {r["scheduled_date"] for r in rows}


def schedule_revisions(db_path: str, user_id: str, topic_id: int, status: str, today: date | None = None) -> int:
    """Insert the revision tasks for ``status`` that don't exist yet.

    Returns the number of tasks actually created. The UNIQUE constraint on
    study_tasks catches a concurrent writer that slipped past the
    existence check.
    """
    today = today or date.today()
    candidates = schedule(status, today)
    dates = [c.scheduled_date.isoformat() for c in candidates]
    existing = get_existing_revision_dates(db_path, user_id, topic_id, dates)
    if existing:
        logger.debug(f"Topic {topic_id}: revisions already on {sorted(existing)}")
    fresh = filter_new(candidates, existing)
    if not fresh:
        logger.info(f"Topic {topic_id}: all revision tasks already exist")
        return 0

    conn = get_connection(db_path)
    created = 0
    try:
        for c in fresh:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO study_tasks
                (user_id, topic_id, scheduled_date, duration_minutes, task_type, require_quiz, is_completed)
                VALUES (?, ?, ?, ?, 'revision', ?, 0)""",
                (user_id, topic_id, c.scheduled_date.isoformat(), c.duration_minutes, int(c.require_quiz)),
            )
            if cursor.rowcount:
                created += 1
            else:
                logger.warning(f"Topic {topic_id}: revision on {c.scheduled_date} inserted concurrently, skipped")
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info(f"Topic {topic_id}: scheduled {created} revision task(s) for status {status}")
    return created


def get_due_revisions(db_path: str, user_id: str, today: date | None = None) -> list[dict]:
    """Revision tasks due on or before today, open ones first."""
    today = today or date.today()
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT st.id, st.topic_id, st.scheduled_date, st.duration_minutes,
            st.require_quiz, st.is_completed, st.completed_at,
            t.name as topic_name, t.content, t.status, t.last_quiz_score,
            c.name as chapter_name, s.name as subject_name, s.color as subject_color
        FROM study_tasks st
        JOIN topics t ON st.topic_id = t.id
        JOIN chapters c ON t.chapter_id = c.id
        JOIN subjects s ON c.subject_id = s.id
        WHERE st.user_id = ? AND st.task_type = 'revision' AND st.scheduled_date <= ?
        ORDER BY st.is_completed ASC, st.scheduled_date ASC, st.id ASC""",
        (user_id, today.isoformat()),
    ).fetchall()
    conn.close()
    return [
        {**dict(r), "require_quiz": bool(r["require_quiz"]), "is_completed": bool(r["is_completed"])}
        for r in rows
    ]


def complete_revision(db_path: str, user_id: str, task_id: int) -> bool:
    """Mark a revision task done. Returns False if there was nothing to update."""
    conn = get_connection(db_path)
    cursor = conn.execute(
        """UPDATE study_tasks SET is_completed = 1, completed_at = ?
        WHERE id = ? AND user_id = ? AND task_type = 'revision' AND is_completed = 0""",
        (datetime.now().isoformat(), task_id, user_id),
    )
    conn.commit()
    conn.close()
    return cursor.rowcount > 0


def complete_due_revisions_for_topic(conn, user_id: str, topic_id: int, today: date) -> int:
    """Close open revision tasks for a topic that are due by ``today``.

    Runs on the caller's connection so it commits with the quiz write.
    """
    cursor = conn.execute(
        """UPDATE study_tasks SET is_completed = 1, completed_at = ?
        WHERE user_id = ? AND topic_id = ? AND task_type = 'revision'
        AND is_completed = 0 AND scheduled_date <= ?""",
        (datetime.now().isoformat(), user_id, topic_id, today.isoformat()),
    )
    return cursor.rowcount

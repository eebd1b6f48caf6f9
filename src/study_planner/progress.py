"""Progress statistics and the task calendar."""
from datetime import date

from study_planner.db import get_connection
from study_planner.models import STUDIED_STATUSES
from study_planner.quiz import get_average_quiz_score


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return round(part / whole * 100)


def get_subject_progress(db_path: str, user_id: str) -> list[dict]:
    placeholders = ", ".join("?" for _ in STUDIED_STATUSES)
    conn = get_connection(db_path)
    rows = conn.execute(
        f"""SELECT s.id, s.name, s.color, s.difficulty,
            COUNT(t.id) as total,
            SUM(CASE WHEN t.status IN ({placeholders}) THEN 1 ELSE 0 END) as done,
            SUM(CASE WHEN t.status = 'strong' THEN 1 ELSE 0 END) as strong,
            SUM(CASE WHEN t.status = 'needs_revision' THEN 1 ELSE 0 END) as needs_revision,
            SUM(CASE WHEN t.status = 'weak' THEN 1 ELSE 0 END) as weak
        FROM subjects s
        LEFT JOIN chapters c ON c.subject_id = s.id
        LEFT JOIN topics t ON t.chapter_id = c.id
        WHERE s.user_id = ?
        GROUP BY s.id
        ORDER BY s.id""",
        (*STUDIED_STATUSES, user_id),
    ).fetchall()
    conn.close()
    results = []
    for r in rows:
        done = r["done"] or 0
        results.append({
            "subject_id": r["id"],
            "name": r["name"],
            "color": r["color"],
            "difficulty": r["difficulty"],
            "total": r["total"],
            "done": done,
            "strong": r["strong"] or 0,
            "needs_revision": r["needs_revision"] or 0,
            "weak": r["weak"] or 0,
            "percent": _percent(done, r["total"]),
        })
    return results


def get_study_stats(db_path: str, user_id: str, today: date | None = None) -> dict:
    today = today or date.today()
    subjects = get_subject_progress(db_path, user_id)
    total = sum(s["total"] for s in subjects)
    done = sum(s["done"] for s in subjects)
    conn = get_connection(db_path)
    minutes = conn.execute(
        "SELECT COALESCE(SUM(duration_minutes), 0) FROM study_tasks WHERE user_id = ? AND is_completed = 1",
        (user_id,),
    ).fetchone()[0]
    due = conn.execute(
        """SELECT COUNT(*) FROM study_tasks
        WHERE user_id = ? AND task_type = 'revision' AND is_completed = 0 AND scheduled_date <= ?""",
        (user_id, today.isoformat()),
    ).fetchone()[0]
    mistakes = conn.execute(
        "SELECT COUNT(*) FROM mistakes WHERE user_id = ? AND reviewed = 0", (user_id,)
    ).fetchone()[0]
    streak_row = conn.execute(
        "SELECT current_streak FROM profiles WHERE user_id = ?", (user_id,)
    ).fetchone()
    conn.close()
    return {
        "topics_total": total,
        "topics_done": done,
        "percent_complete": _percent(done, total),
        "minutes_studied": minutes,
        "avg_quiz_score": get_average_quiz_score(db_path, user_id),
        "current_streak": streak_row["current_streak"] if streak_row else 0,
        "revisions_due": due,
        "unreviewed_mistakes": mistakes,
    }


def get_calendar(db_path: str, user_id: str, start: date, end: date) -> dict[str, dict]:
    """Tasks per scheduled date between ``start`` and ``end`` inclusive."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT st.id, st.topic_id, st.scheduled_date, st.task_type, st.is_completed,
            st.duration_minutes, t.name as topic_name
        FROM study_tasks st JOIN topics t ON st.topic_id = t.id
        WHERE st.user_id = ? AND st.scheduled_date BETWEEN ? AND ?
        ORDER BY st.scheduled_date, st.id""",
        (user_id, start.isoformat(), end.isoformat()),
    ).fetchall()
    conn.close()
    days: dict[str, dict] = {}
    for r in rows:
        day = days.setdefault(r["scheduled_date"], {"tasks": [], "status": "pending"})
        day["tasks"].append({**dict(r), "is_completed": bool(r["is_completed"])})
    for day in days.values():
        finished = sum(1 for t in day["tasks"] if t["is_completed"])
        if finished == len(day["tasks"]):
            day["status"] = "completed"
        elif finished:
            day["status"] = "partial"
    return days

"""Daily study streak tracking."""
from datetime import date, timedelta

from loguru import logger

from study_planner.db import get_connection
from study_planner.exceptions import ConcurrentUpdateError, ProfileNotFoundError

STREAK_UPDATE_RETRIES = 3


def next_streak(last_study_date: str | None, current_streak: int, today: date) -> int:
    """Streak value after studying on ``today``."""
    if last_study_date == (today - timedelta(days=1)).isoformat():
        return (current_streak or 0) + 1
    if last_study_date == today.isoformat():
        return current_streak or 1
    return 1


def update_streak(db_path: str, user_id: str, today: date | None = None) -> int:
    """Record study activity for ``today`` and return the new streak.

    The write only lands if the profile still holds the values it was
    computed from; otherwise it re-reads and tries again.
    """
    today = today or date.today()
    conn = get_connection(db_path)
    try:
        for attempt in range(1, STREAK_UPDATE_RETRIES + 1):
            row = conn.execute(
                "SELECT last_study_date, current_streak FROM profiles WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            if row is None:
                raise ProfileNotFoundError(user_id)
            streak = next_streak(row["last_study_date"], row["current_streak"], today)
            cursor = conn.execute(
                """UPDATE profiles SET last_study_date = ?, current_streak = ?
                WHERE user_id = ? AND last_study_date IS ? AND current_streak = ?""",
                (today.isoformat(), streak, user_id, row["last_study_date"], row["current_streak"]),
            )
            conn.commit()
            if cursor.rowcount:
                logger.info(f"Streak for {user_id} is now {streak}")
                return streak
            logger.warning(f"Streak update for {user_id} lost a race (attempt {attempt})")
    finally:
        conn.close()
    raise ConcurrentUpdateError(f"Could not update streak for {user_id!r} after {STREAK_UPDATE_RETRIES} attempts")

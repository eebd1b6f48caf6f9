"""Mistake notebook: wrong quiz answers kept for later review."""
from datetime import datetime

from study_planner.db import get_connection


def record_mistake(db_path: str, user_id: str, topic_id: int, question: str, user_answer: str,
                   correct_answer: str, explanation: str = "") -> int:
    conn = get_connection(db_path)
    cursor = conn.execute(
        """INSERT INTO mistakes (user_id, topic_id, question, user_answer, correct_answer, explanation, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (user_id, topic_id, question, user_answer, correct_answer, explanation, datetime.now().isoformat()),
    )
    conn.commit()
    mistake_id = cursor.lastrowid
    conn.close()
    return mistake_id


def get_mistakes(db_path: str, user_id: str, unreviewed_only: bool = False) -> list[dict]:
    query = """SELECT m.*, t.name as topic_name, s.name as subject_name
        FROM mistakes m
        JOIN topics t ON m.topic_id = t.id
        JOIN chapters c ON t.chapter_id = c.id
        JOIN subjects s ON c.subject_id = s.id
        WHERE m.user_id = ?"""
    if unreviewed_only:
        query += " AND m.reviewed = 0"
    conn = get_connection(db_path)
    rows = conn.execute(query + " ORDER BY m.created_at DESC, m.id DESC", (user_id,)).fetchall()
    conn.close()
    return [{**dict(r), "reviewed": bool(r["reviewed"])} for r in rows]


def mark_mistake_reviewed(db_path: str, user_id: str, mistake_id: int) -> bool:
    conn = get_connection(db_path)
    cursor = conn.execute(
        "UPDATE mistakes SET reviewed = 1 WHERE id = ? AND user_id = ?",
        (mistake_id, user_id),
    )
    conn.commit()
    conn.close()
    return cursor.rowcount > 0


def delete_mistake(db_path: str, user_id: str, mistake_id: int) -> bool:
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM mistakes WHERE id = ? AND user_id = ?", (mistake_id, user_id))
    conn.commit()
    conn.close()
    return cursor.rowcount > 0

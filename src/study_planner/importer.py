"""Import an already-structured syllabus (subjects > chapters > topics).

Expected shape, in YAML or JSON::

    subjects:
      - name: Physics
        color: "#E4572E"
        difficulty: weak
        chapters:
          - name: Kinematics
            topics:
              - Motion in a straight line
              - name: Projectile motion
                content: Horizontal and vertical components...
"""
import json
from pathlib import Path

import yaml
from loguru import logger

from study_planner.config import DEFAULT_SUBJECT_COLOR
from study_planner.db import get_connection
from study_planner.exceptions import InvalidInputError
from study_planner.models import SUBJECT_DIFFICULTIES


def read_syllabus(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise InvalidInputError(f"Unsupported syllabus format: {suffix or path.name}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"Could not parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInputError(f"{path.name} must contain a mapping with a 'subjects' list")
    return data


def _topic_fields(topic) -> tuple[str, str]:
    if isinstance(topic, str):
        return topic, ""
    if isinstance(topic, dict) and topic.get("name"):
        return str(topic["name"]), str(topic.get("content") or "")
    raise InvalidInputError(f"Topic must be a name or a mapping with 'name': {topic!r}")


def _subject_difficulty(subject: dict) -> str:
    difficulty = subject.get("difficulty") or "medium"
    if difficulty not in SUBJECT_DIFFICULTIES:
        raise InvalidInputError(
            f"Subject {subject['name']!r}: difficulty must be one of {', '.join(SUBJECT_DIFFICULTIES)}, got {difficulty!r}"
        )
    return difficulty


def _require_list(value, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidInputError(f"{what} must be a list")
    return value


def import_syllabus(db_path: str, user_id: str, data: dict) -> dict:
    """Insert subjects, chapters and topics. Topics start out pending."""
    subjects = _require_list(data.get("subjects"), "subjects")
    if not subjects:
        raise InvalidInputError("Syllabus has no subjects")
    counts = {"subjects": 0, "chapters": 0, "topics": 0}
    conn = get_connection(db_path)
    try:
        for subject in subjects:
            if not isinstance(subject, dict) or not subject.get("name"):
                raise InvalidInputError(f"Subject must be a mapping with 'name': {subject!r}")
            subject_id = conn.execute(
                "INSERT INTO subjects (user_id, name, color, difficulty) VALUES (?, ?, ?, ?)",
                (user_id, subject["name"], subject.get("color") or DEFAULT_SUBJECT_COLOR, _subject_difficulty(subject)),
            ).lastrowid
            counts["subjects"] += 1
            for ch_index, chapter in enumerate(_require_list(subject.get("chapters"), "chapters")):
                if not isinstance(chapter, dict) or not chapter.get("name"):
                    raise InvalidInputError(f"Chapter must be a mapping with 'name': {chapter!r}")
                chapter_id = conn.execute(
                    "INSERT INTO chapters (subject_id, user_id, name, order_index) VALUES (?, ?, ?, ?)",
                    (subject_id, user_id, chapter["name"], ch_index),
                ).lastrowid
                counts["chapters"] += 1
                for t_index, topic in enumerate(_require_list(chapter.get("topics"), "topics")):
                    name, content = _topic_fields(topic)
                    conn.execute(
                        """INSERT INTO topics (chapter_id, user_id, name, content, order_index, status)
                        VALUES (?, ?, ?, ?, ?, 'pending')""",
                        (chapter_id, user_id, name, content, t_index),
                    )
                    counts["topics"] += 1
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info(
        f"Imported {counts['subjects']} subjects, {counts['chapters']} chapters, "
        f"{counts['topics']} topics for {user_id}"
    )
    return counts


def import_file(db_path: str, user_id: str, file_path: str) -> dict:
    return import_syllabus(db_path, user_id, read_syllabus(file_path))

"""Data classes for the planner domain model."""
from dataclasses import dataclass
from typing import Optional

TOPIC_STATUSES = ("pending", "in_progress", "completed", "strong", "needs_revision", "weak")
# Statuses a topic holds once it has been studied and quizzed at least once.
STUDIED_STATUSES = ("completed", "strong", "needs_revision", "weak")
CONFIDENCE_LEVELS = ("high", "medium", "low")
TASK_TYPES = ("study", "revision", "quiz")
# How hard the student rates a whole subject, chosen when it is added.
SUBJECT_DIFFICULTIES = ("strong", "medium", "weak")


@dataclass
class Profile:
    user_id: str
    name: str = "Student"
    daily_study_hours: int = 2
    exam_date: Optional[str] = None
    current_streak: int = 0
    last_study_date: Optional[str] = None


@dataclass
class Subject:
    id: int
    user_id: str
    name: str
    color: str = "#18206F"
    difficulty: str = "medium"


@dataclass
class Chapter:
    id: int
    subject_id: int
    user_id: str
    name: str
    order_index: int = 0


@dataclass
class Topic:
    id: int
    chapter_id: int
    user_id: str
    name: str
    content: str = ""
    order_index: int = 0
    status: str = "pending"
    confidence: Optional[str] = None
    last_quiz_score: Optional[int] = None
    completed_at: Optional[str] = None


@dataclass
class StudyTask:
    id: int
    user_id: str
    topic_id: int
    scheduled_date: str
    task_type: str = "study"
    duration_minutes: int = 30
    is_completed: bool = False
    require_quiz: bool = False
    completed_at: Optional[str] = None


@dataclass
class Mistake:
    id: int
    user_id: str
    topic_id: int
    question: str
    user_answer: str
    correct_answer: str
    explanation: str = ""
    reviewed: bool = False


@dataclass
class PlanTopic:
    """A topic joined with its chapter and subject, as the allocator sees it."""
    topic_id: int
    topic_name: str
    subject_id: int
    subject_name: str
    status: Optional[str] = "pending"
    confidence: Optional[str] = None
    chapter_id: Optional[int] = None
    chapter_name: str = ""
    subject_color: str = "#18206F"

    @property
    def is_pending(self) -> bool:
        return self.status in (None, "", "pending")

"""Daily topic allocation weighted by per-subject confidence.

Given every topic a student has (each carrying its subject) and the hours
they can study per day, pick today's pending topics:

1. The time budget allows ``floor(hours * 60 / 30)`` topics.
2. Each subject gets a weight from the confidence recorded on its topics;
   subjects the student is less sure of weigh more.
3. First pass: each subject with pending work gets
   ``max(1, round(target * weight / total_weight))`` topics, capped at what
   it has pending.
4. Trim pass: while the first pass overshoots the target, the subject with
   the most topics gives one back. No subject is trimmed below one topic,
   so a tiny budget still shows one topic per subject.
"""
import math
from dataclasses import dataclass, field

from loguru import logger

from study_planner.exceptions import InvalidInputError
from study_planner.models import PlanTopic

AVERAGE_TOPIC_MINUTES = 30
DEFAULT_SUBJECT_WEIGHT = 1.0

CONFIDENCE_WEIGHTS = {
    "high": 0.8,
    "medium": 1.0,
    "low": 1.5,
}


@dataclass
class SubjectAllocation:
    subject_id: int
    subject_name: str
    color: str
    weight: float
    topic_count: int


@dataclass
class DailyAllocation:
    topics: list[PlanTopic] = field(default_factory=list)
    breakdown: list[SubjectAllocation] = field(default_factory=list)
    max_topics_today: int = 0
    target_count: int = 0

    @property
    def topic_ids(self) -> list[int]:
        return [t.topic_id for t in self.topics]

    @property
    def total(self) -> int:
        return len(self.topics)


@dataclass
class _SubjectBucket:
    subject_id: int
    subject_name: str
    color: str
    topics: list[PlanTopic] = field(default_factory=list)
    pending: list[PlanTopic] = field(default_factory=list)
    weight: float = DEFAULT_SUBJECT_WEIGHT
    selected: list[PlanTopic] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def max_topics_for(daily_hours: float) -> int:
    """How many average-length topics fit into the daily budget."""
    if isinstance(daily_hours, bool) or not isinstance(daily_hours, (int, float)):
        raise InvalidInputError(f"daily_hours must be a number, got {daily_hours!r}")
    if daily_hours <= 0:
        raise InvalidInputError(f"daily_hours must be positive, got {daily_hours}")
    return math.floor(daily_hours * 60 / AVERAGE_TOPIC_MINUTES)


def subject_weight(topics: list[PlanTopic]) -> float:
    """Average confidence weight over the topics that have a confidence."""
    weights = [CONFIDENCE_WEIGHTS[t.confidence] for t in topics if t.confidence in CONFIDENCE_WEIGHTS]
    if not weights:
        return DEFAULT_SUBJECT_WEIGHT
    return sum(weights) / len(weights)


def _group_by_subject(topics: list[PlanTopic]) -> list[_SubjectBucket]:
    buckets: dict[int, _SubjectBucket] = {}
    for topic in topics:
        bucket = buckets.get(topic.subject_id)
        if bucket is None:
            bucket = _SubjectBucket(topic.subject_id, topic.subject_name, topic.subject_color)
            buckets[topic.subject_id] = bucket
        bucket.topics.append(topic)
        if topic.is_pending:
            bucket.pending.append(topic)
    return [b for b in buckets.values() if b.pending]


def _first_pass(buckets: list[_SubjectBucket], target: int) -> None:
    total_weight = sum(b.weight for b in buckets)
    for bucket in buckets:
        share = bucket.weight / total_weight
        count = max(1, round_half_up(target * share))
        count = min(count, len(bucket.pending))
        bucket.selected = bucket.pending[:count]


def _trim(buckets: list[_SubjectBucket], target: int) -> None:
    allocated = sum(len(b.selected) for b in buckets)
    while allocated > target:
        trimmable = [b for b in buckets if len(b.selected) > 1]
        if not trimmable:
            break
        # max() returns the first of equals, so ties go to the earlier subject
        largest = max(trimmable, key=lambda b: len(b.selected))
        largest.selected.pop()
        allocated -= 1


def allocate(topics: list[PlanTopic], daily_hours: float) -> DailyAllocation:
    """Choose today's pending topics, favouring subjects the student finds harder."""
    max_today = max_topics_for(daily_hours)
    buckets = _group_by_subject(topics)
    if not buckets:
        logger.debug("No pending topics to allocate")
        return DailyAllocation(max_topics_today=max_today)

    for bucket in buckets:
        bucket.weight = subject_weight(bucket.topics)

    total_pending = sum(len(b.pending) for b in buckets)
    target = min(max_today, total_pending)

    _first_pass(buckets, target)
    _trim(buckets, target)

    order = sorted(range(len(buckets)), key=lambda i: (-len(buckets[i].selected), i))
    ordered = [buckets[i] for i in order]

    allocation = DailyAllocation(
        topics=[t for b in ordered for t in b.selected],
        breakdown=[
            SubjectAllocation(
                subject_id=b.subject_id,
                subject_name=b.subject_name,
                color=b.color,
                weight=round(b.weight, 2),
                topic_count=len(b.selected),
            )
            for b in ordered
        ],
        max_topics_today=max_today,
        target_count=target,
    )
    logger.debug(
        f"Allocated {allocation.total} of {total_pending} pending topics "
        f"(budget {max_today}, target {target}) across {len(ordered)} subject(s)"
    )
    return allocation

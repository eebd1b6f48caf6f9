"""Mastery classification from a quiz score and self-reported confidence."""
from study_planner.exceptions import InvalidInputError
from study_planner.models import CONFIDENCE_LEVELS


def validate_quiz_input(score: int, confidence: str) -> None:
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidInputError(f"score must be an integer, got {score!r}")
    if not 0 <= score <= 100:
        raise InvalidInputError(f"score must be between 0 and 100, got {score}")
    if confidence not in CONFIDENCE_LEVELS:
        raise InvalidInputError(
            f"confidence must be one of {', '.join(CONFIDENCE_LEVELS)}, got {confidence!r}"
        )


def classify(score: int, confidence: str) -> str:
    """Map a quiz outcome to a mastery status.

    Args:
        score: Quiz score 0-100
        confidence: "high", "medium" or "low"

    Returns:
        "strong", "needs_revision" or "weak".

    A high score alone is not enough for "strong"; the student must also
    feel confident. Medium confidence on its own is enough to avoid "weak".
    """
    validate_quiz_input(score, confidence)
    if score >= 80 and confidence == "high":
        return "strong"
    if score >= 50 or confidence == "medium":
        return "needs_revision"
    return "weak"

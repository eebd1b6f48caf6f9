"""Errors raised by the planner."""


class StudyPlannerError(Exception):
    """Base class for planner errors."""


class InvalidInputError(StudyPlannerError, ValueError):
    """An argument is outside its allowed range or vocabulary."""


class TopicNotFoundError(StudyPlannerError):
    def __init__(self, topic_id: int, user_id: str):
        super().__init__(f"Topic {topic_id} not found for user {user_id!r}")
        self.topic_id = topic_id
        self.user_id = user_id


class ProfileNotFoundError(StudyPlannerError):
    def __init__(self, user_id: str):
        super().__init__(f"No profile for user {user_id!r}")
        self.user_id = user_id


class ConcurrentUpdateError(StudyPlannerError):
    """A compare-and-set update kept losing to another writer."""


class RevisionSchedulingError(StudyPlannerError):
    """The topic status was saved but revision tasks could not be written.

    ``outcome`` holds what was already committed (its ``revisions_scheduled``
    is None) and ``cause`` the underlying error.
    """

    def __init__(self, outcome, cause: Exception):
        super().__init__(
            f"Topic {outcome.topic_id} saved as {outcome.status!r}, "
            f"but scheduling revisions failed: {cause}"
        )
        self.outcome = outcome
        self.cause = cause


class StreakUpdateError(StudyPlannerError):
    """The quiz result and its revisions were saved but the streak was not.

    ``outcome`` holds what was already committed (its ``streak`` is None)
    and ``cause`` the underlying error.
    """

    def __init__(self, outcome, cause: Exception):
        super().__init__(
            f"Topic {outcome.topic_id} saved as {outcome.status!r} with "
            f"{outcome.revisions_scheduled} revision(s), but updating the streak failed: {cause}"
        )
        self.outcome = outcome
        self.cause = cause

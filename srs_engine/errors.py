"""Error taxonomy of the scheduling engine.

Every error is scoped to a single (learner, concept) operation and reaches the
caller unmodified, so a presentation layer can tell "ask the user to retry"
apart from "show a fatal state".
"""


class SchedulerError(Exception):
    """Base class for all engine errors"""

    def __init__(self, message: str, learner_id: str = None, concept_id: str = None):
        super().__init__(message)
        self.learner_id = learner_id
        self.concept_id = concept_id


class InvalidScoreError(SchedulerError):
    """Review score outside [0, 100]; the caller should re-prompt"""

    def __init__(self, score, learner_id: str = None, concept_id: str = None):
        super().__init__(f"Score must be an integer between 0 and 100, got {score!r}", learner_id, concept_id)
        self.score = score


class UnknownConceptError(SchedulerError):
    """No schedule record for the key; sync the catalog and retry"""

    def __init__(self, learner_id: str, concept_id: str):
        super().__init__(
            f"No schedule record for concept {concept_id!r} of learner {learner_id!r}; sync the catalog first",
            learner_id,
            concept_id
        )


class NotFoundError(SchedulerError):
    """upsert() was called for a record that was never created"""

    def __init__(self, learner_id: str, concept_id: str):
        super().__init__(
            f"Cannot update missing schedule record ({learner_id!r}, {concept_id!r})",
            learner_id,
            concept_id
        )


class StaleRecordError(SchedulerError):
    """The stored record changed since it was read"""

    def __init__(self, learner_id: str, concept_id: str, expected_version: int):
        super().__init__(
            f"Schedule record ({learner_id!r}, {concept_id!r}) is no longer at version {expected_version}",
            learner_id,
            concept_id
        )
        self.expected_version = expected_version


class StoreUnavailableError(SchedulerError):
    """Transient storage failure; safe to retry with backoff"""

"""Error taxonomy for the surveillance core.

Scoring and classification are total functions and never raise. Every error
below originates in the workflow controller (entity lookup, delta validation,
persistence) and is surfaced to the caller unchanged. Only
VersionConflictError is retried internally; once the retry budget is spent it
is re-raised as ConflictError.
"""


class SurveillanceError(Exception):
    """Base class for all errors raised by the surveillance core."""
    pass


class EntityNotFoundError(SurveillanceError):
    """Raised when an announcement, tip or market activity id is unknown."""

    def __init__(self, entity_id: str, kind: str = "entity") -> None:
        self.entity_id = entity_id
        self.kind = kind
        super().__init__(f"{kind} not found: {entity_id}")


class InvalidSubmissionError(SurveillanceError):
    """Raised for malformed evidence deltas, methods, overrides or alert specs.

    The targeted entity is left unchanged.
    """
    pass


class LedgerOrderError(InvalidSubmissionError):
    """Raised when an evidence event would be appended out of time order."""
    pass


class PreconditionFailedError(SurveillanceError):
    """Raised when an operation is not permitted in the entity's current state."""
    pass


class VersionConflictError(SurveillanceError):
    """Raised by the store when a save targets a stale revision."""

    def __init__(self, entity_id: str, expected: int, actual: int) -> None:
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"revision conflict on {entity_id}: expected {expected}, stored {actual}"
        )


class ConflictError(SurveillanceError):
    """Raised when concurrent updates exhaust the submission retry budget."""

    def __init__(self, entity_id: str, attempts: int) -> None:
        self.entity_id = entity_id
        self.attempts = attempts
        super().__init__(
            f"could not apply update to {entity_id} after {attempts} attempts"
        )

"""Append-only evidence history.

Every evidence submission against an announcement or tip produces exactly one
EvidenceEvent. Events are frozen once created and the EvidenceLedger holding
them is itself immutable: ``append`` returns a new ledger, so a stale copy can
never overwrite entries another writer added. Timestamps are supplied by the
caller's clock; the ledger only checks they never go backwards.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, RootModel

from fraud_surveillance.exceptions import LedgerOrderError


class SubmissionMethod(str, Enum):
    """How a piece of evidence was obtained (the event kind)."""

    COUNTER_PARTY_VERIFICATION = "counter-party-verification"
    HISTORICAL_FILING_CHECK = "historical-filing-check"
    CONTENT_ANALYSIS = "content-analysis"
    PUBLIC_DOMAIN_CHECK = "public-domain-check"
    CROSS_REFERENCE = "cross-reference"
    MARKET_ACTIVITY_LINK = "market-activity-link"
    MANUAL_REVIEW = "manual-review"
    COMPREHENSIVE_VERIFICATION = "comprehensive-verification"


# Methods allowed to carry an analyst-chosen status
OVERRIDE_METHODS = frozenset(
    {SubmissionMethod.MANUAL_REVIEW, SubmissionMethod.COMPREHENSIVE_VERIFICATION}
)


class EvidenceEvent(BaseModel):
    """Single immutable history entry: what was submitted and what it produced."""

    event_id: str = Field(default_factory=lambda: f"evt-{uuid.uuid4().hex[:12]}")
    timestamp: datetime = Field(..., description="Clock time of the submission")
    method: SubmissionMethod
    status: str = Field(..., description="Status after this submission")
    score: Optional[int] = Field(None, ge=0, le=100, description="Score after this submission")
    previous_status: Optional[str] = None
    previous_score: Optional[int] = Field(None, ge=0, le=100)
    status_overridden: bool = Field(
        False, description="Status chosen by an analyst instead of the classifier"
    )
    notes: str = ""
    submitted_by: Optional[str] = None
    contributions: dict[str, int] = Field(
        default_factory=dict, description="Rule name -> points behind the score"
    )
    evidence_delta: dict[str, Any] = Field(
        default_factory=dict, description="JSON copy of the submitted evidence"
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "event_id": "evt-3f2a9c1d0b7e",
                    "timestamp": "2026-03-02T09:30:00Z",
                    "method": "counter-party-verification",
                    "status": "uncertain",
                    "score": 70,
                    "previous_status": "pending",
                    "previous_score": None,
                    "notes": "Confirmed by counter-party investor relations",
                    "contributions": {"counter_party_confirmed": 20},
                }
            ]
        },
    }


class EvidenceLedger(RootModel[tuple[EvidenceEvent, ...]]):
    """Immutable, time-ordered sequence of evidence events for one entity."""

    root: tuple[EvidenceEvent, ...] = ()

    model_config = {"frozen": True}

    def append(self, event: EvidenceEvent) -> "EvidenceLedger":
        """Return a new ledger with ``event`` at the end.

        Raises:
            LedgerOrderError: If the event is older than the latest entry.
        """
        latest = self.latest
        if latest is not None and event.timestamp < latest.timestamp:
            raise LedgerOrderError(
                f"event at {event.timestamp.isoformat()} precedes latest entry "
                f"at {latest.timestamp.isoformat()}"
            )
        return EvidenceLedger(self.root + (event,))

    def extends(self, other: "EvidenceLedger") -> bool:
        """True if ``other`` is a prefix of this ledger (nothing rewritten or dropped)."""
        if len(other) > len(self):
            return False
        return self.root[: len(other)] == other.root

    @property
    def events(self) -> tuple[EvidenceEvent, ...]:
        return self.root

    @property
    def latest(self) -> Optional[EvidenceEvent]:
        return self.root[-1] if self.root else None

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self) -> Iterator[EvidenceEvent]:  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, index: int) -> EvidenceEvent:
        return self.root[index]

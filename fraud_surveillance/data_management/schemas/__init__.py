"""Schema package for surveillance entities, evidence, history and alerts.

All models are pydantic and JSON-serializable via ``model_dump(mode="json")``:
- Evidence snapshots and deltas use tri-state markers instead of open dicts
- History entries are frozen and held in an append-only EvidenceLedger
- Alerts are a side channel and never alter score, status or history

Usage:
    from fraud_surveillance.data_management.schemas import Announcement, AnnouncementStatus
    announcement = Announcement(company_id="ACME", title="Record orders")
"""

from fraud_surveillance.data_management.schemas.alert_schema import (
    AlertRecord,
    AlertSpec,
    AlertType,
)
from fraud_surveillance.data_management.schemas.entity_schema import (
    MODEL_BY_KIND,
    ActivityType,
    Announcement,
    AnnouncementStatus,
    Entity,
    EntityKind,
    MarketActivity,
    MarketActivityLink,
    ScoredEntity,
    SocialMediaTip,
    TipAuthor,
    TipLink,
    TipStatus,
)
from fraud_surveillance.data_management.schemas.evidence_schema import (
    AnnouncementEvidence,
    AnnouncementEvidenceDelta,
    ContentAnalysis,
    CounterPartyCheck,
    CounterPartyStatus,
    CrossReference,
    HistoricalCheck,
    MarketContext,
    PublicDomainCheck,
    ReferenceSourceType,
    TimingFlags,
    TipEvidence,
    TipEvidenceDelta,
    TriState,
)
from fraud_surveillance.data_management.schemas.ledger_schema import (
    OVERRIDE_METHODS,
    EvidenceEvent,
    EvidenceLedger,
    SubmissionMethod,
)

__all__ = [
    # Alerts
    "AlertRecord",
    "AlertSpec",
    "AlertType",
    # Entities
    "MODEL_BY_KIND",
    "ActivityType",
    "Announcement",
    "AnnouncementStatus",
    "Entity",
    "EntityKind",
    "MarketActivity",
    "MarketActivityLink",
    "ScoredEntity",
    "SocialMediaTip",
    "TipAuthor",
    "TipLink",
    "TipStatus",
    # Evidence
    "AnnouncementEvidence",
    "AnnouncementEvidenceDelta",
    "ContentAnalysis",
    "CounterPartyCheck",
    "CounterPartyStatus",
    "CrossReference",
    "HistoricalCheck",
    "MarketContext",
    "PublicDomainCheck",
    "ReferenceSourceType",
    "TimingFlags",
    "TipEvidence",
    "TipEvidenceDelta",
    "TriState",
    # History
    "OVERRIDE_METHODS",
    "EvidenceEvent",
    "EvidenceLedger",
    "SubmissionMethod",
]

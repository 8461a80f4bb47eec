"""Entities under surveillance: announcements, social-media tips, market activity.

Per the workflow rules, an announcement or tip is created ``pending`` with no
score and an empty ledger. After creation its score, status, evidence and
history change only through an evidence submission, and every save bumps
``revision`` so concurrent writers can detect each other.

MarketActivity is a linkage target and evidence source only; it is never scored.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from fraud_surveillance.data_management.schemas.alert_schema import AlertRecord
from fraud_surveillance.data_management.schemas.evidence_schema import (
    AnnouncementEvidence,
    MarketContext,
    TipEvidence,
)
from fraud_surveillance.data_management.schemas.ledger_schema import EvidenceLedger


class EntityKind(str, Enum):
    ANNOUNCEMENT = "announcement"
    SOCIAL_MEDIA_TIP = "social_media_tip"
    MARKET_ACTIVITY = "market_activity"


class AnnouncementStatus(str, Enum):
    """Verification status of a corporate announcement."""

    PENDING = "pending"
    VERIFIED = "verified"
    FRAUDULENT = "fraudulent"
    UNCERTAIN = "uncertain"


class TipStatus(str, Enum):
    """Analysis status of a social-media stock tip."""

    PENDING = "pending"
    SUSPICIOUS = "suspicious"
    LEGITIMATE = "legitimate"
    FLAGGED = "flagged"


class ActivityType(str, Enum):
    """Kinds of unusual trading events."""

    PRICE_SPIKE = "price_spike"
    VOLUME_SURGE = "volume_surge"
    UNUSUAL_OPTIONS = "unusual_options"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class Announcement(BaseModel):
    """A claim published by a listed company.

    Usage:
        announcement = Announcement(company_id="ACME", title="Record Q3 orders")
        announcement.verification_status  # AnnouncementStatus.PENDING
    """

    kind: Literal["announcement"] = "announcement"
    announcement_id: str = Field(default_factory=lambda: _new_id("ann"))
    company_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    body: str = ""
    published_at: datetime = Field(default_factory=_utc_now)

    verification_status: AnnouncementStatus = AnnouncementStatus.PENDING
    credibility_score: Optional[int] = Field(None, ge=0, le=100)
    evidence: AnnouncementEvidence = Field(default_factory=AnnouncementEvidence)
    verification_history: EvidenceLedger = Field(default_factory=EvidenceLedger)
    alerts: list[AlertRecord] = Field(default_factory=list)

    revision: int = Field(0, ge=0)
    last_verified_at: Optional[datetime] = None

    @property
    def entity_id(self) -> str:
        return self.announcement_id

    @property
    def status(self) -> AnnouncementStatus:
        return self.verification_status

    @property
    def score(self) -> Optional[int]:
        return self.credibility_score


class TipAuthor(BaseModel):
    """Social-media account that published a tip."""

    handle: str = Field(..., min_length=1)
    display_name: Optional[str] = None


class MarketActivityLink(BaseModel):
    """Reference from a tip to a linked unusual trading event."""

    activity_id: str
    stock_symbol: str
    activity_type: ActivityType
    linked_at: datetime


class SocialMediaTip(BaseModel):
    """A stock tip posted by a social-media account."""

    kind: Literal["social_media_tip"] = "social_media_tip"
    tip_id: str = Field(default_factory=lambda: _new_id("tip"))
    platform: str = Field(..., min_length=1)
    author: TipAuthor
    stock_symbol: Optional[str] = None
    published_at: datetime = Field(default_factory=_utc_now)

    analysis_status: TipStatus = TipStatus.PENDING
    suspicious_score: Optional[int] = Field(None, ge=0, le=100)
    evidence: TipEvidence = Field(default_factory=TipEvidence)
    market_context: MarketContext = Field(default_factory=MarketContext)
    verification_history: EvidenceLedger = Field(default_factory=EvidenceLedger)
    linked_market_activity: list[MarketActivityLink] = Field(default_factory=list)

    revision: int = Field(0, ge=0)
    last_analyzed_at: Optional[datetime] = None

    @property
    def entity_id(self) -> str:
        return self.tip_id

    @property
    def content(self) -> str:
        return self.evidence.content

    @property
    def status(self) -> TipStatus:
        return self.analysis_status

    @property
    def score(self) -> Optional[int]:
        return self.suspicious_score


class TipLink(BaseModel):
    """Back-reference from a market activity to a linked tip."""

    tip_id: str
    platform: str
    author_handle: str
    linked_at: datetime


class MarketActivity(BaseModel):
    """Observed unusual trading event for a security."""

    kind: Literal["market_activity"] = "market_activity"
    activity_id: str = Field(default_factory=lambda: _new_id("mkt"))
    stock_symbol: str = Field(..., min_length=1)
    activity_type: ActivityType
    description: str = ""
    observed_at: datetime = Field(default_factory=_utc_now)
    linked_tips: list[TipLink] = Field(default_factory=list)

    revision: int = Field(0, ge=0)

    @property
    def entity_id(self) -> str:
        return self.activity_id


Entity = Union[Announcement, SocialMediaTip, MarketActivity]
ScoredEntity = Union[Announcement, SocialMediaTip]

MODEL_BY_KIND: dict[EntityKind, type[BaseModel]] = {
    EntityKind.ANNOUNCEMENT: Announcement,
    EntityKind.SOCIAL_MEDIA_TIP: SocialMediaTip,
    EntityKind.MARKET_ACTIVITY: MarketActivity,
}

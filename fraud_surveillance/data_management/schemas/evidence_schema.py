"""Evidence snapshot schemas for announcements and social-media tips.

Evidence is an explicit, tagged structure: one optional sub-model per
evidence category, each signal a tri-state (true / false / unknown) rather
than an open dictionary. That keeps the scoring functions total: every field
has a known type and UNKNOWN always means "no contribution".

Snapshots vs deltas:
- A snapshot is the union of all evidence currently attached to an entity.
- A delta is one submission's worth of evidence. Only fields the caller
  explicitly set are merged (pydantic's ``model_fields_set``), so a delta may
  touch any subset of a category. Cross-references are appended, never replaced.

Usage:
    snapshot = AnnouncementEvidence()
    delta = AnnouncementEvidenceDelta(
        counter_party=CounterPartyCheck(status=CounterPartyStatus.CONFIRMED)
    )
    merged = snapshot.merge(delta)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from fraud_surveillance.config.scoring_rules import OFFICIAL_SOURCE_TYPES


class TriState(str, Enum):
    """Presence marker for a boolean signal that may not have been checked yet."""

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def from_optional(cls, value: Optional[bool]) -> "TriState":
        """Map True/False/None onto TRUE/FALSE/UNKNOWN."""
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE


class CounterPartyStatus(str, Enum):
    """Outcome of checking an announcement with the other company it names."""

    CONFIRMED = "confirmed"
    CONTRADICTED = "contradicted"
    UNKNOWN = "unknown"


class ReferenceSourceType(str, Enum):
    """Kind of outlet behind a cross-reference.

    OFFICIAL and REGULATORY references earn the additional official bonus.
    """

    OFFICIAL = "official"
    REGULATORY = "regulatory"
    NEWS = "news"
    FILING = "filing"
    OTHER = "other"


def _merge_fields(current: BaseModel, update: BaseModel) -> BaseModel:
    """Overlay the explicitly-set fields of ``update`` onto ``current``."""
    changes = {name: getattr(update, name) for name in update.model_fields_set}
    return current.model_copy(update=changes)


class CrossReference(BaseModel):
    """External citation (news outlet, regulator, filing) supporting an announcement."""

    source: str = Field(..., min_length=1, description="Outlet or authority name")
    source_type: ReferenceSourceType = Field(
        ReferenceSourceType.OTHER, description="Category of the citing source"
    )
    url: Optional[str] = Field(None, description="Link to the citing document")
    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the reference was attached",
    )

    model_config = {"frozen": True}

    @property
    def is_official(self) -> bool:
        return self.source_type.value in OFFICIAL_SOURCE_TYPES


class CounterPartyCheck(BaseModel):
    """Confirmation or contradiction from the counter-party listed company."""

    status: CounterPartyStatus = Field(CounterPartyStatus.UNKNOWN)
    counter_party_company_id: Optional[str] = Field(
        None, description="Company contacted for confirmation"
    )


class HistoricalCheck(BaseModel):
    """Comparison of the announcement against past filings and performance."""

    performance_consistency: TriState = Field(
        TriState.UNKNOWN,
        description="Claims consistent with historical performance",
    )
    sudden_dramatic_claims: TriState = Field(
        TriState.UNKNOWN,
        description="Sudden dramatic claims inconsistent with past filings",
    )


class ContentAnalysis(BaseModel):
    """Language flags assigned by an analyst or upstream content job.

    Flags are independent: an announcement can be both detailed and promotional.
    """

    vague: bool = False
    promotional: bool = False
    exaggerated: bool = False
    precise: bool = False
    detailed: bool = False


class PublicDomainCheck(BaseModel):
    """Consistency with public-domain information and pre-release trading."""

    consistent_with_public_info: TriState = Field(TriState.UNKNOWN)
    unusual_market_activity_before: TriState = Field(
        TriState.UNKNOWN,
        description="Unusual trading observed before release (potential leak)",
    )
    sources: list[str] = Field(
        default_factory=list, description="Public sources consulted"
    )


class TimingFlags(BaseModel):
    """Release-timing attributes of an announcement."""

    released_after_hours: bool = False
    contains_material_info: bool = False


class AnnouncementEvidence(BaseModel):
    """Complete evidence snapshot for one announcement.

    A category left as None has never been checked and contributes nothing.
    """

    cross_references: tuple[CrossReference, ...] = Field(default_factory=tuple)
    counter_party: Optional[CounterPartyCheck] = None
    historical: Optional[HistoricalCheck] = None
    content: Optional[ContentAnalysis] = None
    public_domain: Optional[PublicDomainCheck] = None
    timing: Optional[TimingFlags] = None

    model_config = {"extra": "forbid"}

    def merge(self, delta: "AnnouncementEvidenceDelta") -> "AnnouncementEvidence":
        """Return a new snapshot with ``delta`` applied; ``self`` is not modified."""
        changes: dict = {}
        for category in ("counter_party", "historical", "content", "public_domain", "timing"):
            update = getattr(delta, category)
            if update is None:
                continue
            current = getattr(self, category)
            changes[category] = (
                update.model_copy() if current is None else _merge_fields(current, update)
            )
        if delta.cross_references:
            changes["cross_references"] = self.cross_references + tuple(delta.cross_references)
        return self.model_copy(update=changes)


class AnnouncementEvidenceDelta(BaseModel):
    """One submission's worth of announcement evidence."""

    cross_references: list[CrossReference] = Field(default_factory=list)
    counter_party: Optional[CounterPartyCheck] = None
    historical: Optional[HistoricalCheck] = None
    content: Optional[ContentAnalysis] = None
    public_domain: Optional[PublicDomainCheck] = None
    timing: Optional[TimingFlags] = None

    model_config = {"extra": "forbid"}

    def categories(self) -> set[str]:
        """Names of the evidence categories this delta carries."""
        present = {
            name
            for name in ("counter_party", "historical", "content", "public_domain", "timing")
            if getattr(self, name) is not None
        }
        if self.cross_references:
            present.add("cross_references")
        return present


class TipEvidence(BaseModel):
    """Evidence snapshot intrinsic to a social-media tip."""

    author_verified: TriState = Field(
        TriState.UNKNOWN, description="Platform-verified author account"
    )
    author_account_age_days: Optional[int] = Field(
        None, ge=0, description="Account age in days; None when unknown"
    )
    content: str = Field("", description="Tip text as published")

    model_config = {"extra": "forbid"}

    def merge(self, delta: "TipEvidenceDelta") -> "TipEvidence":
        changes = {
            name: getattr(delta, name)
            for name in delta.model_fields_set
            if name in ("author_verified", "author_account_age_days")
        }
        return self.model_copy(update=changes)


class MarketContext(BaseModel):
    """Market signals linked to a tip (supplied by linked market activity)."""

    unusual_volume: TriState = Field(TriState.UNKNOWN)

    model_config = {"extra": "forbid"}

    def merge(self, delta: "TipEvidenceDelta") -> "MarketContext":
        if "unusual_volume" not in delta.model_fields_set:
            return self
        return self.model_copy(update={"unusual_volume": delta.unusual_volume})


class TipEvidenceDelta(BaseModel):
    """One submission's worth of tip evidence.

    The tip's content is the claim itself and cannot be changed by a delta.
    """

    author_verified: TriState = TriState.UNKNOWN
    author_account_age_days: Optional[int] = Field(None, ge=0)
    unusual_volume: TriState = TriState.UNKNOWN

    model_config = {"extra": "forbid"}

    def categories(self) -> set[str]:
        return set(self.model_fields_set)

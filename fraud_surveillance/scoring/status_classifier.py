"""Map scores onto verification / analysis statuses.

Announcements: score >= 70 -> verified, score <= 30 -> fraudulent, otherwise
uncertain. Tips mirror the pattern: >= 70 suspicious, <= 30 legitimate,
otherwise flagged for review. A score of None means the entity was never
evaluated and is always pending.

The display bands (high / medium / low) are what the dashboard colours scores
by; they are independent of status.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from fraud_surveillance.config import scoring_rules as rules
from fraud_surveillance.data_management.schemas.entity_schema import (
    AnnouncementStatus,
    TipStatus,
)

if TYPE_CHECKING:
    from fraud_surveillance.config.settings import Settings


class ScoreBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNSCORED = "unscored"


class StatusClassifier:
    """
    Threshold-based status classification with configurable thresholds.

    Usage:
        classifier = StatusClassifier()
        classifier.classify_announcement(72)  # AnnouncementStatus.VERIFIED
        classifier.classify_tip(50)           # TipStatus.FLAGGED
    """

    VERIFIED_THRESHOLD = rules.VERIFIED_THRESHOLD
    FRAUDULENT_THRESHOLD = rules.FRAUDULENT_THRESHOLD
    SUSPICIOUS_THRESHOLD = rules.SUSPICIOUS_THRESHOLD
    LEGITIMATE_THRESHOLD = rules.LEGITIMATE_THRESHOLD

    def __init__(
        self,
        verified_threshold: int = VERIFIED_THRESHOLD,
        fraudulent_threshold: int = FRAUDULENT_THRESHOLD,
        suspicious_threshold: int = SUSPICIOUS_THRESHOLD,
        legitimate_threshold: int = LEGITIMATE_THRESHOLD,
    ):
        """
        Initialize classifier with configurable thresholds.

        Args:
            verified_threshold: Credibility at or above which an announcement is verified
            fraudulent_threshold: Credibility at or below which an announcement is fraudulent
            suspicious_threshold: Suspicion at or above which a tip is suspicious
            legitimate_threshold: Suspicion at or below which a tip is legitimate
        """
        if fraudulent_threshold >= verified_threshold:
            raise ValueError("fraudulent_threshold must be below verified_threshold")
        if legitimate_threshold >= suspicious_threshold:
            raise ValueError("legitimate_threshold must be below suspicious_threshold")
        self.verified_threshold = verified_threshold
        self.fraudulent_threshold = fraudulent_threshold
        self.suspicious_threshold = suspicious_threshold
        self.legitimate_threshold = legitimate_threshold

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StatusClassifier":
        """Build a classifier from a Settings instance."""
        return cls(
            verified_threshold=settings.announcement_verified_threshold,
            fraudulent_threshold=settings.announcement_fraudulent_threshold,
            suspicious_threshold=settings.tip_suspicious_threshold,
            legitimate_threshold=settings.tip_legitimate_threshold,
        )

    def classify_announcement(self, score: Optional[int]) -> AnnouncementStatus:
        if score is None:
            return AnnouncementStatus.PENDING
        if score >= self.verified_threshold:
            return AnnouncementStatus.VERIFIED
        if score <= self.fraudulent_threshold:
            return AnnouncementStatus.FRAUDULENT
        return AnnouncementStatus.UNCERTAIN

    def classify_tip(self, score: Optional[int]) -> TipStatus:
        if score is None:
            return TipStatus.PENDING
        if score >= self.suspicious_threshold:
            return TipStatus.SUSPICIOUS
        if score <= self.legitimate_threshold:
            return TipStatus.LEGITIMATE
        return TipStatus.FLAGGED


_default_classifier = StatusClassifier()


def classify_announcement(score: Optional[int]) -> AnnouncementStatus:
    """Classify with the default thresholds."""
    return _default_classifier.classify_announcement(score)


def classify_tip(score: Optional[int]) -> TipStatus:
    """Classify with the default thresholds."""
    return _default_classifier.classify_tip(score)


def _band(score: Optional[int]) -> ScoreBand:
    if score is None:
        return ScoreBand.UNSCORED
    if score >= rules.HIGH_BAND_THRESHOLD:
        return ScoreBand.HIGH
    if score >= rules.MEDIUM_BAND_THRESHOLD:
        return ScoreBand.MEDIUM
    return ScoreBand.LOW


def credibility_band(score: Optional[int]) -> ScoreBand:
    """High / medium / low credibility band for an announcement score."""
    return _band(score)


def risk_band(score: Optional[int]) -> ScoreBand:
    """High / medium / low risk band for a tip suspicion score."""
    return _band(score)

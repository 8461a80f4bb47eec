"""Scoring rules engine and status classifier.

Both halves are pure: scoring maps an evidence snapshot to a bounded integer,
classification maps that integer to a status. Neither touches storage or the
clock, so each can be tested term by term.
"""

from fraud_surveillance.scoring.rules_engine import (
    ScoreBreakdown,
    clamp_score,
    explain_announcement_score,
    explain_tip_score,
    score_announcement,
    score_tip,
)
from fraud_surveillance.scoring.status_classifier import (
    ScoreBand,
    StatusClassifier,
    classify_announcement,
    classify_tip,
    credibility_band,
    risk_band,
)

__all__ = [
    "ScoreBreakdown",
    "clamp_score",
    "explain_announcement_score",
    "explain_tip_score",
    "score_announcement",
    "score_tip",
    "ScoreBand",
    "StatusClassifier",
    "classify_announcement",
    "classify_tip",
    "credibility_band",
    "risk_band",
]

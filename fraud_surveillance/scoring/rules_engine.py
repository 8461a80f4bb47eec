"""Additive point-system scoring for announcements and social-media tips.

Announcement credibility (baseline 50, higher = more trustworthy):
- Cross-references: +5 each, capped at +20; official/regulatory +3 each, capped at +15
- Historical consistency: +15 consistent, -20 inconsistent
- Sudden dramatic claims: -25
- Counter-party: +20 confirmed, -30 contradicted
- Public domain: +10 consistent, -15 inconsistent
- After-hours release of material information: -5
- Unusual market activity before release: -10
- Content flags: vague -5, promotional -10, exaggerated -15, precise +10, detailed +5

Tip suspicion (baseline 30, higher = riskier):
- Verified author: -15
- Account younger than 30 days: +20
- Unusual volume in linked market activity: +15
- High-pressure phrasing ("guaranteed", "100%", "double your money"): +25 once

Both scores are clamped to [0, 100]. Unknown signals contribute nothing, so the
functions are total over any evidence snapshot and never raise. Each rule
contributes independently of the others and of the order evidence arrived in.

Usage:
    from fraud_surveillance.scoring.rules_engine import score_announcement

    score = score_announcement(announcement.evidence)
    breakdown = explain_announcement_score(announcement.evidence)
"""

from typing import Optional

from pydantic import BaseModel, Field

from fraud_surveillance.config import scoring_rules as rules
from fraud_surveillance.data_management.schemas.evidence_schema import (
    AnnouncementEvidence,
    CounterPartyStatus,
    MarketContext,
    TipEvidence,
    TriState,
)


class ScoreBreakdown(BaseModel):
    """Full score derivation for audit and debugging.

    Storing the per-rule contributions shows WHY an entity has its score, not
    just the number.
    """

    baseline: int
    contributions: dict[str, int] = Field(default_factory=dict)
    raw_total: int
    score: int = Field(..., ge=rules.SCORE_MIN, le=rules.SCORE_MAX)

    @property
    def clamped(self) -> bool:
        return self.raw_total != self.score


def clamp_score(value: int) -> int:
    """Clamp a raw point total into [SCORE_MIN, SCORE_MAX]."""
    return max(rules.SCORE_MIN, min(rules.SCORE_MAX, value))


def _tri_state_points(value: TriState, when_true: int, when_false: int) -> int:
    if value == TriState.TRUE:
        return when_true
    if value == TriState.FALSE:
        return when_false
    return 0


def _build_breakdown(baseline: int, contributions: dict[str, int]) -> ScoreBreakdown:
    # Zero-point rules are dropped so the breakdown lists only what moved the score
    nonzero = {rule: points for rule, points in contributions.items() if points}
    raw_total = baseline + sum(nonzero.values())
    return ScoreBreakdown(
        baseline=baseline,
        contributions=nonzero,
        raw_total=raw_total,
        score=clamp_score(raw_total),
    )


def explain_announcement_score(evidence: AnnouncementEvidence) -> ScoreBreakdown:
    """Compute the credibility breakdown for an announcement evidence snapshot.

    Args:
        evidence: Merged evidence snapshot. Not modified.

    Returns:
        ScoreBreakdown with per-rule contributions and the clamped score.
    """
    contributions: dict[str, int] = {}

    references = evidence.cross_references
    contributions["cross_references"] = min(
        len(references) * rules.CROSS_REFERENCE_POINTS, rules.CROSS_REFERENCE_CAP
    )
    official_count = sum(1 for ref in references if ref.is_official)
    contributions["official_references"] = min(
        official_count * rules.OFFICIAL_REFERENCE_POINTS, rules.OFFICIAL_REFERENCE_CAP
    )

    if evidence.historical is not None:
        contributions["historical_consistency"] = _tri_state_points(
            evidence.historical.performance_consistency,
            rules.HISTORICAL_CONSISTENT_POINTS,
            rules.HISTORICAL_INCONSISTENT_POINTS,
        )
        if evidence.historical.sudden_dramatic_claims == TriState.TRUE:
            contributions["sudden_dramatic_claims"] = rules.SUDDEN_DRAMATIC_CLAIMS_POINTS

    if evidence.counter_party is not None:
        status = evidence.counter_party.status
        if status == CounterPartyStatus.CONFIRMED:
            contributions["counter_party_confirmed"] = rules.COUNTER_PARTY_CONFIRMED_POINTS
        elif status == CounterPartyStatus.CONTRADICTED:
            contributions["counter_party_contradicted"] = rules.COUNTER_PARTY_CONTRADICTED_POINTS

    if evidence.public_domain is not None:
        contributions["public_domain_consistency"] = _tri_state_points(
            evidence.public_domain.consistent_with_public_info,
            rules.PUBLIC_DOMAIN_CONSISTENT_POINTS,
            rules.PUBLIC_DOMAIN_INCONSISTENT_POINTS,
        )
        if evidence.public_domain.unusual_market_activity_before == TriState.TRUE:
            contributions["unusual_activity_before_release"] = (
                rules.UNUSUAL_ACTIVITY_BEFORE_POINTS
            )

    timing = evidence.timing
    if timing is not None and timing.released_after_hours and timing.contains_material_info:
        contributions["after_hours_material_release"] = rules.AFTER_HOURS_MATERIAL_POINTS

    if evidence.content is not None:
        for flag, points in rules.CONTENT_FLAG_POINTS.items():
            if getattr(evidence.content, flag):
                contributions[f"content_{flag}"] = points

    return _build_breakdown(rules.ANNOUNCEMENT_BASELINE, contributions)


def score_announcement(evidence: AnnouncementEvidence) -> int:
    """Credibility score in [0, 100] for an announcement evidence snapshot."""
    return explain_announcement_score(evidence).score


def contains_high_pressure_phrase(content: str) -> bool:
    """True if the text contains any configured high-pressure phrase."""
    lowered = content.lower()
    return any(phrase in lowered for phrase in rules.HIGH_PRESSURE_PHRASES)


def explain_tip_score(
    evidence: TipEvidence,
    market_context: Optional[MarketContext] = None,
) -> ScoreBreakdown:
    """Compute the suspicion breakdown for a social-media tip.

    Args:
        evidence: Author and content evidence for the tip. Not modified.
        market_context: Signals from linked market activity, if any.

    Returns:
        ScoreBreakdown with per-rule contributions and the clamped score.
    """
    contributions: dict[str, int] = {}

    if evidence.author_verified == TriState.TRUE:
        contributions["author_verified"] = rules.AUTHOR_VERIFIED_POINTS

    age = evidence.author_account_age_days
    if age is not None and age < rules.NEW_ACCOUNT_MAX_AGE_DAYS:
        contributions["new_account"] = rules.NEW_ACCOUNT_POINTS

    if market_context is not None and market_context.unusual_volume == TriState.TRUE:
        contributions["unusual_volume"] = rules.UNUSUAL_VOLUME_POINTS

    if contains_high_pressure_phrase(evidence.content):
        contributions["high_pressure_language"] = rules.HIGH_PRESSURE_POINTS

    return _build_breakdown(rules.TIP_BASELINE, contributions)


def score_tip(
    evidence: TipEvidence,
    market_context: Optional[MarketContext] = None,
) -> int:
    """Suspicion score in [0, 100] for a social-media tip."""
    return explain_tip_score(evidence, market_context).score

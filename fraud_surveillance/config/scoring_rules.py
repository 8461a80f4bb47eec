"""Point values and thresholds for the scoring rules engine.

Announcement credibility (higher = more trustworthy) starts at a neutral 50.
Tip suspicion (higher = riskier) starts at 30, a default-suspicious prior.
Both scores are clamped to [SCORE_MIN, SCORE_MAX].

The point values are the documented contract, not weights tuned against
observed fraud cases.
"""

from typing import Dict, FrozenSet, Tuple

SCORE_MIN = 0
SCORE_MAX = 100

# Announcement credibility
ANNOUNCEMENT_BASELINE = 50

CROSS_REFERENCE_POINTS = 5
CROSS_REFERENCE_CAP = 20
OFFICIAL_REFERENCE_POINTS = 3
OFFICIAL_REFERENCE_CAP = 15
OFFICIAL_SOURCE_TYPES: FrozenSet[str] = frozenset({"official", "regulatory"})

HISTORICAL_CONSISTENT_POINTS = 15
HISTORICAL_INCONSISTENT_POINTS = -20
SUDDEN_DRAMATIC_CLAIMS_POINTS = -25

COUNTER_PARTY_CONFIRMED_POINTS = 20
COUNTER_PARTY_CONTRADICTED_POINTS = -30

PUBLIC_DOMAIN_CONSISTENT_POINTS = 10
PUBLIC_DOMAIN_INCONSISTENT_POINTS = -15

AFTER_HOURS_MATERIAL_POINTS = -5
UNUSUAL_ACTIVITY_BEFORE_POINTS = -10

# Content-analysis flags are independent of each other
CONTENT_FLAG_POINTS: Dict[str, int] = {
    "vague": -5,
    "promotional": -10,
    "exaggerated": -15,
    "precise": 10,
    "detailed": 5,
}

# Social-media tip suspicion
TIP_BASELINE = 30

AUTHOR_VERIFIED_POINTS = -15
NEW_ACCOUNT_POINTS = 20
NEW_ACCOUNT_MAX_AGE_DAYS = 30
UNUSUAL_VOLUME_POINTS = 15
HIGH_PRESSURE_POINTS = 25

# Matched case-insensitively; the bonus applies once regardless of match count
HIGH_PRESSURE_PHRASES: Tuple[str, ...] = (
    "guaranteed",
    "100%",
    "double your money",
)

# Status thresholds (inclusive)
VERIFIED_THRESHOLD = 70
FRAUDULENT_THRESHOLD = 30
SUSPICIOUS_THRESHOLD = 70
LEGITIMATE_THRESHOLD = 30

# Display bands used by the dashboard
HIGH_BAND_THRESHOLD = 70
MEDIUM_BAND_THRESHOLD = 40

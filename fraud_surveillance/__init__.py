"""Fraud surveillance evidence scoring core.

Scores corporate announcements (credibility) and social-media stock tips
(suspicion) from accumulated evidence, classifies them, and keeps an
append-only evidence history per entity.
"""

from fraud_surveillance.scoring import score_announcement, score_tip

__version__ = "0.1.0"

__all__ = ["score_announcement", "score_tip", "__version__"]

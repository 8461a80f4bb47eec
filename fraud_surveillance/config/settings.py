"""Application settings using Pydantic BaseSettings for environment variable management."""

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from fraud_surveillance.config import scoring_rules


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        announcement_verified_threshold: Credibility at or above which an announcement is verified
        announcement_fraudulent_threshold: Credibility at or below which an announcement is fraudulent
        tip_suspicious_threshold: Suspicion at or above which a tip is suspicious
        tip_legitimate_threshold: Suspicion at or below which a tip is legitimate
        tip_auto_classification: Derive tip status from score (False = analyst-driven only)
        submission_max_attempts: Attempts per submission before a Conflict is raised
        submission_retry_multiplier: Exponential back-off multiplier in seconds
        submission_retry_max_wait: Upper bound on a single back-off wait in seconds
        persistence_path: Optional JSON file backing the reference entity store
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )
    announcement_verified_threshold: int = Field(
        default=scoring_rules.VERIFIED_THRESHOLD,
        ge=0,
        le=100,
        description="Score >= threshold classifies an announcement as verified"
    )
    announcement_fraudulent_threshold: int = Field(
        default=scoring_rules.FRAUDULENT_THRESHOLD,
        ge=0,
        le=100,
        description="Score <= threshold classifies an announcement as fraudulent"
    )
    tip_suspicious_threshold: int = Field(
        default=scoring_rules.SUSPICIOUS_THRESHOLD,
        ge=0,
        le=100,
        description="Score >= threshold classifies a tip as suspicious"
    )
    tip_legitimate_threshold: int = Field(
        default=scoring_rules.LEGITIMATE_THRESHOLD,
        ge=0,
        le=100,
        description="Score <= threshold classifies a tip as legitimate"
    )
    tip_auto_classification: bool = Field(
        default=True,
        description="Derive tip status from the suspicion score"
    )
    submission_max_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts per submission under concurrent updates"
    )
    submission_retry_multiplier: float = Field(
        default=0.05,
        ge=0.0,
        description="Exponential back-off multiplier (seconds)"
    )
    submission_retry_max_wait: float = Field(
        default=1.0,
        ge=0.0,
        description="Maximum wait between attempts (seconds)"
    )
    persistence_path: Optional[str] = Field(
        default=None,
        description="JSON file for the reference entity store"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @model_validator(mode="after")
    def check_threshold_order(self) -> "Settings":
        """Reject threshold pairs that would make the uncertain band empty or inverted."""
        if self.announcement_fraudulent_threshold >= self.announcement_verified_threshold:
            raise ValueError(
                "announcement_fraudulent_threshold must be below announcement_verified_threshold"
            )
        if self.tip_legitimate_threshold >= self.tip_suspicious_threshold:
            raise ValueError(
                "tip_legitimate_threshold must be below tip_suspicious_threshold"
            )
        return self


# Default instance, used only when no Settings object is injected
settings = Settings()

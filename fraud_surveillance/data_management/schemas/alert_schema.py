"""Fraud alert records.

Alerts are a side-channel audit trail attached to fraudulent announcements.
They never feed back into score, status or evidence history.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class AlertType(str, Enum):
    """Alert categories offered to analysts."""

    WARNING = "warning"
    FRAUD = "fraud"
    CORRECTION = "correction"


class AlertSpec(BaseModel):
    """Caller-supplied alert request (recipients are media houses and investors)."""

    recipients: list[str] = Field(..., min_length=1)
    alert_type: AlertType = AlertType.WARNING
    message: str = Field(..., min_length=1)
    evidence_ids: list[str] = Field(
        default_factory=list, description="Evidence event ids backing the alert"
    )

    model_config = {"extra": "forbid"}

    @field_validator("recipients")
    @classmethod
    def strip_recipients(cls, value: list[str]) -> list[str]:
        cleaned = [r.strip() for r in value if r and r.strip()]
        if not cleaned:
            raise ValueError("at least one non-blank recipient is required")
        return cleaned

    @field_validator("message")
    @classmethod
    def require_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("alert message must not be blank")
        return value.strip()


class AlertRecord(BaseModel):
    """Alert as recorded on the announcement and handed to the dispatcher."""

    alert_id: str = Field(default_factory=lambda: f"alert-{uuid.uuid4().hex[:12]}")
    announcement_id: str
    recipients: list[str]
    alert_type: AlertType
    message: str
    evidence_ids: list[str] = Field(default_factory=list)
    created_at: datetime

    model_config = {"frozen": True}

    @classmethod
    def from_spec(
        cls, announcement_id: str, spec: AlertSpec, created_at: datetime
    ) -> "AlertRecord":
        return cls(
            announcement_id=announcement_id,
            recipients=list(spec.recipients),
            alert_type=spec.alert_type,
            message=spec.message,
            evidence_ids=list(spec.evidence_ids),
            created_at=created_at,
        )

"""Tests for alert specs and records."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fraud_surveillance.data_management.schemas import AlertRecord, AlertSpec, AlertType


class TestAlertSpec:
    def test_defaults(self) -> None:
        spec = AlertSpec(recipients=["desk@financialtimes.example"], message="Do not publish")
        assert spec.alert_type == AlertType.WARNING
        assert spec.evidence_ids == []

    def test_recipients_required(self) -> None:
        with pytest.raises(ValidationError):
            AlertSpec(recipients=[], message="Fraud suspected")

    def test_blank_recipients_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AlertSpec(recipients=["  ", ""], message="Fraud suspected")

    def test_recipients_are_stripped(self) -> None:
        spec = AlertSpec(recipients=[" investors@acme.example ", ""], message="x")
        assert spec.recipients == ["investors@acme.example"]

    def test_blank_message_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AlertSpec(recipients=["newsroom@example.com"], message="   ")

    def test_unknown_alert_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AlertSpec.model_validate(
                {"recipients": ["a@example.com"], "message": "m", "alert_type": "panic"}
            )


class TestAlertRecord:
    def test_from_spec(self) -> None:
        created_at = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
        spec = AlertSpec(
            recipients=["newsroom@example.com"],
            alert_type=AlertType.FRAUD,
            message="Announcement contradicted by counter-party",
            evidence_ids=["evt-1"],
        )

        record = AlertRecord.from_spec("ann-1", spec, created_at)

        assert record.announcement_id == "ann-1"
        assert record.alert_type == AlertType.FRAUD
        assert record.evidence_ids == ["evt-1"]
        assert record.created_at == created_at
        assert record.alert_id.startswith("alert-")

"""Tests for StatusClassifier thresholds and display bands."""

from typing import get_type_hints

import pytest
from pydantic import ValidationError

from fraud_surveillance.config.settings import Settings
from fraud_surveillance.data_management.schemas import AnnouncementStatus, TipStatus
from fraud_surveillance.scoring.status_classifier import (
    ScoreBand,
    StatusClassifier,
    classify_announcement,
    classify_tip,
    credibility_band,
    risk_band,
)


class TestAnnouncementClassification:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (None, AnnouncementStatus.PENDING),
            (0, AnnouncementStatus.FRAUDULENT),
            (30, AnnouncementStatus.FRAUDULENT),
            (31, AnnouncementStatus.UNCERTAIN),
            (50, AnnouncementStatus.UNCERTAIN),
            (69, AnnouncementStatus.UNCERTAIN),
            (70, AnnouncementStatus.VERIFIED),
            (100, AnnouncementStatus.VERIFIED),
        ],
    )
    def test_default_thresholds(self, score, expected) -> None:
        assert classify_announcement(score) == expected


class TestTipClassification:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (None, TipStatus.PENDING),
            (0, TipStatus.LEGITIMATE),
            (30, TipStatus.LEGITIMATE),
            (31, TipStatus.FLAGGED),
            (69, TipStatus.FLAGGED),
            (70, TipStatus.SUSPICIOUS),
            (100, TipStatus.SUSPICIOUS),
        ],
    )
    def test_default_thresholds(self, score, expected) -> None:
        assert classify_tip(score) == expected


class TestConfigurableThresholds:
    def test_custom_thresholds(self) -> None:
        classifier = StatusClassifier(verified_threshold=80, fraudulent_threshold=20)
        assert classifier.classify_announcement(75) == AnnouncementStatus.UNCERTAIN
        assert classifier.classify_announcement(25) == AnnouncementStatus.UNCERTAIN
        assert classifier.classify_announcement(80) == AnnouncementStatus.VERIFIED

    def test_inverted_thresholds_rejected(self) -> None:
        with pytest.raises(ValueError):
            StatusClassifier(verified_threshold=30, fraudulent_threshold=30)
        with pytest.raises(ValueError):
            StatusClassifier(suspicious_threshold=20, legitimate_threshold=40)

    def test_from_settings(self) -> None:
        settings = Settings(tip_suspicious_threshold=60, tip_legitimate_threshold=20)
        classifier = StatusClassifier.from_settings(settings)
        assert classifier.classify_tip(60) == TipStatus.SUSPICIOUS
        assert classifier.classify_tip(25) == TipStatus.FLAGGED
        assert classifier.classify_announcement(70) == AnnouncementStatus.VERIFIED

    def test_from_settings_annotated_with_settings(self) -> None:
        hints = get_type_hints(StatusClassifier.from_settings, localns={"Settings": Settings})
        assert hints["settings"] is Settings

    def test_settings_reject_inverted_thresholds(self) -> None:
        with pytest.raises(ValidationError):
            Settings(announcement_verified_threshold=40, announcement_fraudulent_threshold=60)


class TestBands:
    @pytest.mark.parametrize(
        "score,band",
        [(None, ScoreBand.UNSCORED), (0, ScoreBand.LOW), (39, ScoreBand.LOW),
         (40, ScoreBand.MEDIUM), (69, ScoreBand.MEDIUM), (70, ScoreBand.HIGH)],
    )
    def test_bands(self, score, band) -> None:
        assert credibility_band(score) == band
        assert risk_band(score) == band

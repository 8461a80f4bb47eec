"""Shared fixtures: deterministic clock, fresh store, controller with fast retries."""

from datetime import datetime, timedelta, timezone

import pytest

from fraud_surveillance.config.settings import Settings
from fraud_surveillance.data_management.entity_store import EntityStore
from fraud_surveillance.data_management.schemas import AlertRecord
from fraud_surveillance.workflow.alerting import LogAlertDispatcher
from fraud_surveillance.workflow.verification_controller import VerificationController


class SteppingClock:
    """Clock that advances a fixed step on every read."""

    def __init__(
        self,
        start: datetime = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc),
        step: timedelta = timedelta(minutes=1),
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class RecordingDispatcher(LogAlertDispatcher):
    """Logging dispatcher that also keeps every record it was handed."""

    def __init__(self) -> None:
        super().__init__()
        self.dispatched: list[AlertRecord] = []

    async def dispatch(self, record: AlertRecord) -> None:
        self.dispatched.append(record)
        await super().dispatch(record)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        submission_max_attempts=5,
        submission_retry_multiplier=0.0,
        submission_retry_max_wait=0.0,
    )


@pytest.fixture
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def controller(
    store: EntityStore,
    clock: SteppingClock,
    dispatcher: RecordingDispatcher,
    fast_settings: Settings,
) -> VerificationController:
    return VerificationController(
        store, clock=clock, dispatcher=dispatcher, settings=fast_settings
    )

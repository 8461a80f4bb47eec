"""Alert dispatch collaborators.

The controller records an alert on the announcement first and only then hands
the record to a dispatcher. Delivery (e-mail, webhooks, media feeds) lives
behind the AlertDispatcher protocol; this module ships the logging dispatcher
used when none is injected.
"""

from dataclasses import dataclass
from typing import Protocol

from fraud_surveillance.data_management.schemas import AlertRecord
from fraud_surveillance.utils.logging import get_structured_logger


@dataclass
class DispatchMetrics:
    """Per-dispatcher counters for one process run."""
    attempted: int = 0
    sent: int = 0
    errors: int = 0


class AlertDispatcher(Protocol):
    """Protocol for alert delivery. Implementations should update self.metrics."""
    name: str
    metrics: DispatchMetrics

    async def dispatch(self, record: AlertRecord) -> None: ...


class LogAlertDispatcher:
    """Dispatcher that only logs alerts; the default when none is injected."""

    name: str = "log"

    def __init__(self) -> None:
        self.metrics = DispatchMetrics()
        self.logger = get_structured_logger(__name__, component="LogAlertDispatcher")

    async def dispatch(self, record: AlertRecord) -> None:
        self.metrics.attempted += 1
        try:
            self.logger.info(
                "alert_dispatched",
                alert_id=record.alert_id,
                announcement_id=record.announcement_id,
                alert_type=record.alert_type.value,
                recipients=len(record.recipients),
            )
        except Exception as e:
            self.metrics.errors += 1
            raise
        self.metrics.sent += 1

"""Evidence submission workflow and alert dispatch."""

from fraud_surveillance.workflow.alerting import (
    AlertDispatcher,
    DispatchMetrics,
    LogAlertDispatcher,
)
from fraud_surveillance.workflow.verification_controller import (
    VerificationController,
    utc_now,
)

__all__ = [
    "AlertDispatcher",
    "DispatchMetrics",
    "LogAlertDispatcher",
    "VerificationController",
    "utc_now",
]

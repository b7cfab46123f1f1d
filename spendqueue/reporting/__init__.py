"""Status reporting package."""

from spendqueue.reporting.status import StatusReport, build_status, is_purchasable

__all__ = [
    "StatusReport",
    "build_status",
    "is_purchasable",
]

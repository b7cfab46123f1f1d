"""Accrual engine package."""

from spendqueue.accrual.engine import (
    Recalculation,
    apply_recalculation,
    elapsed_seconds,
    recalculate,
)

__all__ = [
    "Recalculation",
    "apply_recalculation",
    "elapsed_seconds",
    "recalculate",
]

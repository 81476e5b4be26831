"""
Set-level transforms applied after field normalization.
"""

from .deduplicator import deduplicate_latest
from .interval_builder import build_intervals
from .measure_reconciler import (
    ReconciliationStats,
    reconcile,
    reconcile_all,
    repair_sales_amount,
    repair_unit_price,
)

__all__ = [
    "deduplicate_latest",
    "build_intervals",
    "ReconciliationStats",
    "reconcile",
    "reconcile_all",
    "repair_sales_amount",
    "repair_unit_price",
]

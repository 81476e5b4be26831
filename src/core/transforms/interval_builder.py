"""
Slowly-changing-dimension interval builder for product versions.

The raw product feed carries only a start date per version. Within each
product key the versions are ordered by start date and each one is closed
the day before its successor starts; the last version stays open.
"""

from datetime import date, timedelta
from itertools import groupby
from typing import Iterable

from src.core.models import ProductRecord
from src.core.normalizers import ProductCandidate

ONE_DAY = timedelta(days=1)


def _version_order(candidate: ProductCandidate) -> tuple:
    # Null start dates sort first; equal start dates keep ingestion order
    valid_from = candidate.record.valid_from
    return (
        candidate.record.key,
        valid_from is not None,
        valid_from or date.min,
        candidate.sequence,
    )


def build_intervals(candidates: Iterable[ProductCandidate]) -> list[ProductRecord]:
    """
    Compute valid_to for every product version.

    Args:
        candidates: Normalized product versions (valid_to not yet set)

    Returns:
        ProductRecords ordered by key then version order, with
        valid_to = next valid_from - 1 day, or None for the latest version
    """
    ordered = sorted(candidates, key=_version_order)

    records: list[ProductRecord] = []
    for _, partition in groupby(ordered, key=lambda c: c.record.key):
        versions = [c.record for c in partition]
        for current, successor in zip(versions, versions[1:] + [None]):
            valid_to = None
            if successor is not None and successor.valid_from not in (None, date.min):
                valid_to = successor.valid_from - ONE_DAY
            records.append(current.model_copy(update={"valid_to": valid_to}))

    return records

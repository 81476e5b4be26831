"""
Last-writer-wins deduplication of customer versions.

Collapses every raw version of a customer id into the single version with
the latest recency key.
"""

from typing import Iterable

from src.core.models import CustomerRecord
from src.core.normalizers import CustomerCandidate


def deduplicate_latest(candidates: Iterable[CustomerCandidate]) -> list[CustomerRecord]:
    """
    Keep one record per customer id: the one with the maximum recency key.

    Candidates are folded in ingestion order, so among versions with an
    identical recency the first encountered wins. Rows without an id never
    reach this point (the normalizer drops them).

    Args:
        candidates: Normalized customer versions

    Returns:
        One CustomerRecord per id, ordered by id
    """
    best: dict[int, CustomerCandidate] = {}
    for candidate in sorted(candidates, key=lambda c: c.sequence):
        customer_id = candidate.record.id
        current = best.get(customer_id)
        # Strictly greater keeps the first-seen version on ties
        if current is None or candidate.recency > current.recency:
            best[customer_id] = candidate

    return [best[customer_id].record for customer_id in sorted(best)]

"""
Field normalization for raw (bronze) rows.
"""

from .field_rules import (
    EPOCH_SENTINEL,
    INT32_BITS,
    INT64_BITS,
    clean_string,
    fits_signed,
    lookup_code,
    parse_date,
    parse_timestamp,
    parse_yyyymmdd,
    to_int,
)
from .record_normalizer import CustomerCandidate, ProductCandidate, RecordNormalizer

__all__ = [
    "EPOCH_SENTINEL",
    "INT32_BITS",
    "INT64_BITS",
    "clean_string",
    "fits_signed",
    "lookup_code",
    "parse_date",
    "parse_timestamp",
    "parse_yyyymmdd",
    "to_int",
    "CustomerCandidate",
    "ProductCandidate",
    "RecordNormalizer",
]

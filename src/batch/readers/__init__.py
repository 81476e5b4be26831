"""
Raw (bronze) store readers.
"""

from .csv_reader import CSVReader
from .raw_store import RawStore, SparkRawStore, StoreReadError

__all__ = [
    "CSVReader",
    "RawStore",
    "SparkRawStore",
    "StoreReadError",
]

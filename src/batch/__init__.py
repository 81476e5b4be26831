"""
Silver batch load: raw store readers, cleaned store writers and the orchestrator.
"""

from .pipeline import ALL_KINDS, SilverLoadError, SilverPipeline, utc_now
from .readers import CSVReader, RawStore, SparkRawStore, StoreReadError
from .writers import CleanedStore, PostgresSilverWriter, StoreWriteError

__all__ = [
    "ALL_KINDS",
    "SilverLoadError",
    "SilverPipeline",
    "utc_now",
    "CSVReader",
    "RawStore",
    "SparkRawStore",
    "StoreReadError",
    "CleanedStore",
    "PostgresSilverWriter",
    "StoreWriteError",
]

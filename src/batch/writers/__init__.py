"""
Cleaned (silver) store writers.
"""

from .silver_writer import CleanedStore, PostgresSilverWriter, StoreWriteError

__all__ = [
    "CleanedStore",
    "PostgresSilverWriter",
    "StoreWriteError",
]

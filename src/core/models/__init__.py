"""
Core data models for the silver cleansing pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .load_result import LoadResult, RunReport
from .raw_record import EntityKind, RawRecord
from .silver_records import (
    CustomerDemoRecord,
    CustomerRecord,
    LocationRecord,
    ProductCategoryRecord,
    ProductRecord,
    SalesLineRecord,
    SilverRecord,
)

__all__ = [
    "EntityKind",
    "RawRecord",
    "SilverRecord",
    "CustomerRecord",
    "ProductRecord",
    "SalesLineRecord",
    "CustomerDemoRecord",
    "LocationRecord",
    "ProductCategoryRecord",
    "LoadResult",
    "RunReport",
]

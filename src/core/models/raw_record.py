"""
RawRecord model representing a single bronze row as read from the raw store.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class EntityKind(str, Enum):
    """Source-entity kinds handled by the silver load."""

    CUSTOMER = "customer"
    PRODUCT = "product"
    SALES_LINE = "sales_line"
    CUSTOMER_DEMO = "customer_demo"
    LOCATION = "location"
    PRODUCT_CATEGORY = "product_category"


class RawRecord(BaseModel):
    """
    A bronze row: column name -> text or null (immutable once read).

    Attributes:
        kind: Which source entity this row belongs to
        values: Raw column values, column names lower-cased
        sequence: Ingestion order within the kind's snapshot (tie-breaking only)
    """

    kind: EntityKind
    values: dict[str, str | None] = Field(default_factory=dict)
    sequence: int = Field(0, ge=0)

    @field_validator("values", mode="before")
    @classmethod
    def stringify_values(cls, v: dict[str, Any]) -> dict[str, str | None]:
        """Lower-case column names and keep non-null values as text."""
        return {
            str(name).lower(): (None if value is None else str(value))
            for name, value in (v or {}).items()
        }

    def get(self, column: str) -> str | None:
        """Return the raw text for a column, or None when absent."""
        return self.values.get(column.lower())

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "kind": "customer",
                "values": {
                    "cst_id": "11000",
                    "cst_key": "AW00011000",
                    "cst_firstname": " Jon",
                    "cst_lastname": "Yang ",
                    "cst_marital_status": "M",
                    "cst_gndr": "M",
                    "cst_create_date": "2025-10-06"
                },
                "sequence": 0
            }
        }

"""
Cleaned (silver) record models, one per entity kind.

Every record carries loaded_at, the single timestamp taken for the load
that produced it.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class SilverRecord(BaseModel):
    """Base class for cleaned records."""

    loaded_at: datetime


class CustomerRecord(SilverRecord):
    """
    Current version of a CRM customer (one per id).

    Attributes:
        id: Customer id
        key: Customer business key
        first_name: Trimmed first name
        last_name: Trimmed last name
        marital_status: Single, Married or the fallback label
        gender: Female, Male or the fallback label
        created_on: Creation date of the winning version
    """

    id: int
    key: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    marital_status: str
    gender: str
    created_on: date | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 11000,
                "key": "AW00011000",
                "first_name": "Jon",
                "last_name": "Yang",
                "marital_status": "Married",
                "gender": "Male",
                "created_on": "2025-10-06",
                "loaded_at": "2025-11-17T00:00:00Z"
            }
        }


class ProductRecord(SilverRecord):
    """
    A product version with its validity interval.

    Attributes:
        id: Product id (None when unparseable)
        category_id: Category id derived from the raw product key
        key: Product key (grouping key for versions)
        name: Product name
        cost: Cost, None when unparseable
        line: Mountain, Road, Other Sales, Touring or the fallback label
        valid_from: Version start date
        valid_to: Day before the next version starts; None while current
    """

    id: int | None = None
    category_id: str | None = None
    key: str = Field(..., min_length=1)
    name: str | None = None
    cost: int | None = None
    line: str
    valid_from: date | None = None
    valid_to: date | None = None


class SalesLineRecord(SilverRecord):
    """
    A sales order line with reconciled measures.

    Attributes:
        order_num: Order number (pass-through key)
        product_key: Product key
        customer_id: Customer id, None when unparseable
        order_date: Order date, None for 0 or malformed YYYYMMDD
        ship_date: Ship date
        due_date: Due date
        sales_amount: quantity * unit_price after repair
        quantity: Quantity as received
        unit_price: Repaired unit price
    """

    order_num: str | None = None
    product_key: str | None = None
    customer_id: int | None = None
    order_date: date | None = None
    ship_date: date | None = None
    due_date: date | None = None
    sales_amount: int | None = None
    quantity: int | None = None
    unit_price: int | None = None


class CustomerDemoRecord(SilverRecord):
    """ERP customer demographics."""

    customer_id: str = Field(..., min_length=1)
    birth_date: date | None = None
    gender: str


class LocationRecord(SilverRecord):
    """ERP customer location with a canonical country name."""

    customer_id: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class ProductCategoryRecord(SilverRecord):
    """ERP product category (pass-through)."""

    id: str | None = None
    category: str | None = None
    subcategory: str | None = None
    maintenance_flag: str | None = None

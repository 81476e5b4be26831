"""
Per-kind record normalizers.

Turns one RawRecord into a typed candidate for its entity kind. Field
anomalies degrade to None or the fallback label; only a missing identity
key makes a normalizer return None, which callers treat as a silent drop.
"""

from datetime import datetime
from typing import NamedTuple

from src.core.config import PipelineConfig
from src.core.models import (
    CustomerDemoRecord,
    CustomerRecord,
    EntityKind,
    LocationRecord,
    ProductCategoryRecord,
    ProductRecord,
    RawRecord,
    SalesLineRecord,
)

from .field_rules import (
    EPOCH_SENTINEL,
    INT64_BITS,
    clean_string,
    is_blank,
    lookup_code,
    parse_date,
    parse_timestamp,
    parse_yyyymmdd,
    to_int,
)

CUSTOMER_DEMO_ID_PREFIX = "NAS"
PRODUCT_CATEGORY_PREFIX_LENGTH = 5
PRODUCT_KEY_OFFSET = 6


class CustomerCandidate(NamedTuple):
    """A normalized customer version plus its dedup recency key."""

    record: CustomerRecord
    recency: datetime
    sequence: int


class ProductCandidate(NamedTuple):
    """A normalized product version awaiting its end date."""

    record: ProductRecord
    sequence: int


class RecordNormalizer:
    """
    Normalizes raw rows of every entity kind for one load.

    The load timestamp is fixed at construction, so every record produced
    by one normalizer carries the same loaded_at and the same notion of
    "today".
    """

    def __init__(self, config: PipelineConfig, loaded_at: datetime):
        """
        Initialize normalizer.

        Args:
            config: Pipeline configuration (code tables, fallback label)
            loaded_at: Load timestamp stamped on every record
        """
        self.config = config
        self.codes = config.code_tables
        self.unknown = config.unknown_label
        self.loaded_at = loaded_at
        self.run_date = loaded_at.date()

    def normalize(self, raw: RawRecord):
        """Dispatch to the normalizer for the record's kind."""
        handlers = {
            EntityKind.CUSTOMER: self.normalize_customer,
            EntityKind.PRODUCT: self.normalize_product,
            EntityKind.SALES_LINE: self.normalize_sales_line,
            EntityKind.CUSTOMER_DEMO: self.normalize_customer_demo,
            EntityKind.LOCATION: self.normalize_location,
            EntityKind.PRODUCT_CATEGORY: self.normalize_product_category,
        }
        return handlers[raw.kind](raw)

    def normalize_customer(self, raw: RawRecord) -> CustomerCandidate | None:
        customer_id = to_int(raw.get("cst_id"))
        if customer_id is None:
            return None

        created_raw = raw.get("cst_create_date")
        record = CustomerRecord(
            id=customer_id,
            key=clean_string(raw.get("cst_key")),
            first_name=clean_string(raw.get("cst_firstname")),
            last_name=clean_string(raw.get("cst_lastname")),
            marital_status=lookup_code(
                raw.get("cst_marital_status"), self.codes.marital_status, self.unknown
            ),
            gender=lookup_code(raw.get("cst_gndr"), self.codes.gender, self.unknown),
            created_on=parse_date(created_raw),
            loaded_at=self.loaded_at,
        )
        recency = parse_timestamp(created_raw) or EPOCH_SENTINEL
        return CustomerCandidate(record=record, recency=recency, sequence=raw.sequence)

    def normalize_product(self, raw: RawRecord) -> ProductCandidate | None:
        """
        Split the raw product key into category id and product key.

        "CO-RF-FR-R92B-58" -> category_id "CO_RF", key "FR-R92B-58".
        """
        raw_key = clean_string(raw.get("prd_key"))
        if is_blank(raw_key):
            return None
        key = raw_key[PRODUCT_KEY_OFFSET:]
        if not key:
            return None

        record = ProductRecord(
            id=to_int(raw.get("prd_id")),
            category_id=raw_key[:PRODUCT_CATEGORY_PREFIX_LENGTH].replace("-", "_"),
            key=key,
            name=clean_string(raw.get("prd_nm")),
            cost=to_int(raw.get("prd_cost")),
            line=lookup_code(raw.get("prd_line"), self.codes.product_line, self.unknown),
            valid_from=parse_date(raw.get("prd_start_dt")),
            loaded_at=self.loaded_at,
        )
        return ProductCandidate(record=record, sequence=raw.sequence)

    def normalize_sales_line(self, raw: RawRecord) -> SalesLineRecord:
        # Order number is a pass-through key: never validated, never dropped
        return SalesLineRecord(
            order_num=clean_string(raw.get("sls_ord_num")),
            product_key=clean_string(raw.get("sls_prd_key")),
            customer_id=to_int(raw.get("sls_cust_id")),
            order_date=parse_yyyymmdd(raw.get("sls_order_dt")),
            ship_date=parse_yyyymmdd(raw.get("sls_ship_dt")),
            due_date=parse_yyyymmdd(raw.get("sls_due_dt")),
            sales_amount=to_int(raw.get("sls_sales"), bits=INT64_BITS),
            quantity=to_int(raw.get("sls_quantity")),
            unit_price=to_int(raw.get("sls_price")),
            loaded_at=self.loaded_at,
        )

    def normalize_customer_demo(self, raw: RawRecord) -> CustomerDemoRecord | None:
        customer_id = clean_string(raw.get("cid"))
        if customer_id and customer_id.startswith(CUSTOMER_DEMO_ID_PREFIX):
            customer_id = customer_id[len(CUSTOMER_DEMO_ID_PREFIX):]
        if is_blank(customer_id):
            return None

        birth_date = parse_date(raw.get("bdate"))
        if birth_date is not None and birth_date > self.run_date:
            birth_date = None

        return CustomerDemoRecord(
            customer_id=customer_id,
            birth_date=birth_date,
            gender=lookup_code(raw.get("gen"), self.codes.gender, self.unknown),
            loaded_at=self.loaded_at,
        )

    def normalize_location(self, raw: RawRecord) -> LocationRecord | None:
        customer_id = clean_string(raw.get("cid"))
        if customer_id is not None:
            customer_id = customer_id.replace("-", "")
        if is_blank(customer_id):
            return None

        return LocationRecord(
            customer_id=customer_id,
            country=self.canonical_country(raw.get("cntry")),
            loaded_at=self.loaded_at,
        )

    def canonical_country(self, value: str | None) -> str:
        """
        Expand a country code to its name.

        Blank -> fallback label; known code -> name; any other non-blank
        value is returned trimmed, unchanged.
        """
        if is_blank(value):
            return self.unknown
        code = value.strip()
        return self.codes.country.get(code.upper(), code)

    def normalize_product_category(self, raw: RawRecord) -> ProductCategoryRecord:
        return ProductCategoryRecord(
            id=clean_string(raw.get("id")),
            category=clean_string(raw.get("cat")),
            subcategory=clean_string(raw.get("subcat")),
            maintenance_flag=clean_string(raw.get("maintenance")),
            loaded_at=self.loaded_at,
        )

"""
Silver table definitions and DDL operations for the data warehouse.

Maps each entity kind to its cleaned table: table name, column names and
types, and the record field feeding each column.
"""

from typing import NamedTuple

from psycopg import sql

from src.core.models import EntityKind
from src.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)


class SilverColumn(NamedTuple):
    name: str
    sql_type: str
    field: str


class SilverTable(NamedTuple):
    """Cleaned table layout for one entity kind."""

    name: str
    columns: tuple[SilverColumn, ...]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def fields(self) -> list[str]:
        return [c.field for c in self.columns]


LOAD_TIMESTAMP_COLUMN = SilverColumn("dwh_create_date", "TIMESTAMPTZ", "loaded_at")

SILVER_TABLES: dict[EntityKind, SilverTable] = {
    EntityKind.CUSTOMER: SilverTable("crm_cust_info", (
        SilverColumn("cst_id", "INTEGER", "id"),
        SilverColumn("cst_key", "TEXT", "key"),
        SilverColumn("cst_firstname", "TEXT", "first_name"),
        SilverColumn("cst_lastname", "TEXT", "last_name"),
        SilverColumn("cst_marital_status", "TEXT", "marital_status"),
        SilverColumn("cst_gndr", "TEXT", "gender"),
        SilverColumn("cst_create_date", "DATE", "created_on"),
        LOAD_TIMESTAMP_COLUMN,
    )),
    EntityKind.PRODUCT: SilverTable("crm_prd_info", (
        SilverColumn("prd_id", "INTEGER", "id"),
        SilverColumn("cat_id", "TEXT", "category_id"),
        SilverColumn("prd_key", "TEXT", "key"),
        SilverColumn("prd_nm", "TEXT", "name"),
        SilverColumn("prd_cost", "INTEGER", "cost"),
        SilverColumn("prd_line", "TEXT", "line"),
        SilverColumn("prd_start_dt", "DATE", "valid_from"),
        SilverColumn("prd_end_dt", "DATE", "valid_to"),
        LOAD_TIMESTAMP_COLUMN,
    )),
    EntityKind.SALES_LINE: SilverTable("crm_sales_details", (
        SilverColumn("sls_ord_num", "TEXT", "order_num"),
        SilverColumn("sls_prd_key", "TEXT", "product_key"),
        SilverColumn("sls_cust_id", "INTEGER", "customer_id"),
        SilverColumn("sls_order_dt", "DATE", "order_date"),
        SilverColumn("sls_ship_dt", "DATE", "ship_date"),
        SilverColumn("sls_due_dt", "DATE", "due_date"),
        SilverColumn("sls_sales", "BIGINT", "sales_amount"),
        SilverColumn("sls_quantity", "INTEGER", "quantity"),
        SilverColumn("sls_price", "INTEGER", "unit_price"),
        LOAD_TIMESTAMP_COLUMN,
    )),
    EntityKind.CUSTOMER_DEMO: SilverTable("erp_cust_az12", (
        SilverColumn("cid", "TEXT", "customer_id"),
        SilverColumn("bdate", "DATE", "birth_date"),
        SilverColumn("gen", "TEXT", "gender"),
        LOAD_TIMESTAMP_COLUMN,
    )),
    EntityKind.LOCATION: SilverTable("erp_loc_a101", (
        SilverColumn("cid", "TEXT", "customer_id"),
        SilverColumn("cntry", "TEXT", "country"),
        LOAD_TIMESTAMP_COLUMN,
    )),
    EntityKind.PRODUCT_CATEGORY: SilverTable("erp_px_cat_g1v2", (
        SilverColumn("id", "TEXT", "id"),
        SilverColumn("cat", "TEXT", "category"),
        SilverColumn("subcat", "TEXT", "subcategory"),
        SilverColumn("maintenance", "TEXT", "maintenance_flag"),
        LOAD_TIMESTAMP_COLUMN,
    )),
}


def qualified_table(schema: str, kind: EntityKind) -> sql.Composed:
    """schema.table identifier for a kind's cleaned table."""
    return sql.Identifier(schema, SILVER_TABLES[kind].name)


class SilverTableManager:
    """
    Provisions silver tables and reports their row counts.
    """

    def __init__(self, pool: DatabaseConnectionPool, schema: str = "silver"):
        """
        Initialize table manager.

        Args:
            pool: Database connection pool
            schema: Database schema holding the silver tables
        """
        self.pool = pool
        self.schema = schema

    def create_tables(self, drop_existing: bool = False) -> None:
        """
        Create the silver schema and one table per entity kind.

        Args:
            drop_existing: Drop and recreate tables that already exist
        """
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(self.schema))
                )
                for kind, table in SILVER_TABLES.items():
                    target = qualified_table(self.schema, kind)
                    if drop_existing:
                        cur.execute(sql.SQL("DROP TABLE IF EXISTS {}").format(target))
                    columns = sql.SQL(", ").join(
                        sql.SQL("{} {}").format(sql.Identifier(c.name), sql.SQL(c.sql_type))
                        for c in table.columns
                    )
                    cur.execute(
                        sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(target, columns)
                    )
            conn.commit()

        logger.info(f"Silver tables ready in schema '{self.schema}'")

    def row_counts(self) -> dict[EntityKind, int]:
        """
        Count rows in every silver table.

        Returns:
            Row count per entity kind
        """
        counts = {}
        for kind in SILVER_TABLES:
            query = sql.SQL("SELECT COUNT(*) AS row_count FROM {}").format(
                qualified_table(self.schema, kind)
            )
            result = self.pool.execute_query(query)
            counts[kind] = result[0]["row_count"] if result else 0
        return counts

"""
Pytest configuration and fixtures for silver pipeline tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import threading
from datetime import datetime, timezone
from typing import Generator, Sequence

import pytest

from src.core.models import EntityKind, RawRecord, SilverRecord


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers or a local Spark"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )


# =======================
# IN-MEMORY STORES
# =======================

class InMemoryRawStore:
    """Raw store serving fixed rows per kind; kinds listed in failing raise on read."""

    def __init__(self, rows: dict[EntityKind, list[dict]] | None = None, failing: set | None = None):
        self.rows = rows or {}
        self.failing = failing or set()
        self.reads: list[EntityKind] = []

    def read(self, kind: EntityKind) -> list[RawRecord]:
        self.reads.append(kind)
        if kind in self.failing:
            raise ConnectionError(f"raw store unavailable for {kind.value}")
        return [
            RawRecord(kind=kind, values=values, sequence=idx)
            for idx, values in enumerate(self.rows.get(kind, []))
        ]


class InMemoryCleanedStore:
    """Cleaned store keeping the latest full replace per kind."""

    def __init__(self, failing: set | None = None):
        self.tables: dict[EntityKind, list[SilverRecord]] = {}
        self.failing = failing or set()
        self.replace_calls = 0
        self._lock = threading.Lock()

    def replace_all(self, kind: EntityKind, records: Sequence[SilverRecord]) -> int:
        with self._lock:
            self.replace_calls += 1
            if kind in self.failing:
                raise IOError(f"cleaned store rejected write for {kind.value}")
            self.tables[kind] = list(records)
        return len(records)


class FixedClock:
    """Run clock returning a fixed instant and counting reads."""

    def __init__(self, instant: datetime):
        self.instant = instant
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.instant


@pytest.fixture
def load_time() -> datetime:
    return datetime(2025, 11, 17, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(load_time) -> FixedClock:
    return FixedClock(load_time)


@pytest.fixture
def cleaned_store() -> InMemoryCleanedStore:
    return InMemoryCleanedStore()


@pytest.fixture
def bronze_rows() -> dict[EntityKind, list[dict]]:
    """A small bronze snapshot covering every entity kind and its anomalies"""
    return {
        EntityKind.CUSTOMER: [
            {"cst_id": "1", "cst_key": "AW00000001", "cst_firstname": " Ann ", "cst_lastname": "Lee",
             "cst_marital_status": "s", "cst_gndr": "F", "cst_create_date": "2021-01-01"},
            {"cst_id": "1", "cst_key": "AW00000001", "cst_firstname": "Anne", "cst_lastname": " Lee ",
             "cst_marital_status": "M", "cst_gndr": "f", "cst_create_date": "2022-06-01"},
            {"cst_id": "2", "cst_key": "AW00000002", "cst_firstname": "Bo", "cst_lastname": "Ng",
             "cst_marital_status": "X", "cst_gndr": None, "cst_create_date": "not a date"},
            {"cst_id": None, "cst_key": "AW00000003", "cst_firstname": "Ghost", "cst_lastname": "Row",
             "cst_marital_status": "S", "cst_gndr": "M", "cst_create_date": "2023-01-01"},
        ],
        EntityKind.PRODUCT: [
            {"prd_id": "210", "prd_key": "CO-RF-FR-R92B-58", "prd_nm": "HL Road Frame", "prd_cost": "",
             "prd_line": "R ", "prd_start_dt": "2003-07-01 00:00:00"},
            {"prd_id": "211", "prd_key": "CO-RF-FR-R92B-58", "prd_nm": "HL Road Frame", "prd_cost": "12",
             "prd_line": "r", "prd_start_dt": "2011-07-01"},
            {"prd_id": "212", "prd_key": "CO-RF-FR-R92B-58", "prd_nm": "HL Road Frame", "prd_cost": "14",
             "prd_line": "R", "prd_start_dt": "2007-12-28"},
            {"prd_id": "313", "prd_key": "AC-HE-HL-U509-R", "prd_nm": "Sport-100 Helmet", "prd_cost": "13",
             "prd_line": "S", "prd_start_dt": "2011-07-01"},
            {"prd_id": "999", "prd_key": "  ", "prd_nm": "No key", "prd_cost": "1",
             "prd_line": "M", "prd_start_dt": "2011-07-01"},
        ],
        EntityKind.SALES_LINE: [
            {"sls_ord_num": "SO43697", "sls_prd_key": "BK-R93R-62", "sls_cust_id": "21768",
             "sls_order_dt": "20101229", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": "20", "sls_quantity": "2", "sls_price": "0"},
            {"sls_ord_num": "SO43698", "sls_prd_key": "BK-M82S-44", "sls_cust_id": "28389",
             "sls_order_dt": "0", "sls_ship_dt": "2011010", "sls_due_dt": "20110110",
             "sls_sales": "999", "sls_quantity": "3", "sls_price": "5"},
            {"sls_ord_num": "", "sls_prd_key": "BK-M82S-44", "sls_cust_id": "abc",
             "sls_order_dt": "20101229", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": None, "sls_quantity": "1", "sls_price": "-40"},
        ],
        EntityKind.CUSTOMER_DEMO: [
            {"cid": "NASAW00011000", "bdate": "1971-10-06", "gen": "Male"},
            {"cid": "AW00011001", "bdate": "2999-01-01", "gen": " f "},
            {"cid": "AW00011002", "bdate": "garbage", "gen": ""},
        ],
        EntityKind.LOCATION: [
            {"cid": "AW-00011000", "cntry": "DE"},
            {"cid": "AW-00011001", "cntry": " USA "},
            {"cid": "AW-00011002", "cntry": "ZZ "},
            {"cid": "AW-00011003", "cntry": "   "},
            {"cid": "AW-00011004", "cntry": None},
        ],
        EntityKind.PRODUCT_CATEGORY: [
            {"id": "AC_BR", "cat": "Accessories", "subcat": "Bike Racks", "maintenance": "Yes"},
            {"id": "BI_MB", "cat": " Bikes", "subcat": "Mountain Bikes ", "maintenance": "Yes"},
        ],
    }


@pytest.fixture
def raw_store(bronze_rows) -> InMemoryRawStore:
    return InMemoryRawStore(bronze_rows)


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session():
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("silver-pipeline-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .config("spark.sql.warehouse.dir", "/tmp/spark-warehouse")
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_datawarehouse"
    ) as postgres:
        yield postgres


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator:
    """
    Open a connection pool against the container with fresh silver tables

    Yields:
        DatabaseConnectionPool
    """
    from src.warehouse.connection import DatabaseConnectionPool
    from src.warehouse.silver_tables import SilverTableManager

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_datawarehouse",
        user="test_pipeline",
        password="test_password",
    )
    pool.open()
    SilverTableManager(pool).create_tables(drop_existing=True)

    try:
        yield pool
    finally:
        pool.close()

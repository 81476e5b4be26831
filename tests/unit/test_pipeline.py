"""
Unit tests for the silver pipeline orchestrator using in-memory stores.
"""

from datetime import date, datetime, timezone

import pytest

from src.batch.pipeline import ALL_KINDS, SilverLoadError, SilverPipeline
from src.core.models import EntityKind

from tests.conftest import FixedClock, InMemoryCleanedStore, InMemoryRawStore


@pytest.fixture
def pipeline(raw_store, cleaned_store, fixed_clock) -> SilverPipeline:
    return SilverPipeline(raw_store=raw_store, cleaned_store=cleaned_store, clock=fixed_clock)


class TestLoadKind:
    """Tests for single entity kind loads"""

    def test_customer_load_deduplicates_and_drops_missing_ids(self, pipeline, cleaned_store, load_time):
        result = pipeline.load_kind(EntityKind.CUSTOMER)

        customers = cleaned_store.tables[EntityKind.CUSTOMER]
        assert [c.id for c in customers] == [1, 2]
        assert customers[0].first_name == "Anne"
        assert customers[0].created_on == date(2022, 6, 1)
        assert customers[0].marital_status == "Married"
        assert customers[1].marital_status == "Unknown"
        assert customers[1].gender == "Unknown"

        assert result.status == "success"
        assert result.rows_read == 4
        assert result.rows_written == 2
        assert result.rows_dropped == 2  # one without id, one superseded version
        assert result.loaded_at == load_time

    def test_dropped_rows_counted_by_reason(self, pipeline, raw_store, load_time):
        records, dropped = pipeline.transform(
            EntityKind.CUSTOMER, raw_store.read(EntityKind.CUSTOMER), load_time
        )

        assert len(records) == 2
        assert dropped == {"missing_identity": 1, "superseded": 1}

    def test_product_load_builds_intervals(self, pipeline, cleaned_store):
        pipeline.load_kind(EntityKind.PRODUCT)

        products = cleaned_store.tables[EntityKind.PRODUCT]
        frames = [p for p in products if p.key == "FR-R92B-58"]
        assert [p.id for p in frames] == [210, 212, 211]
        assert [p.valid_to for p in frames] == [date(2007, 12, 27), date(2011, 6, 30), None]
        assert all(p.line == "Road" for p in frames)
        assert frames[0].cost is None
        assert len(products) == 4

    def test_sales_load_reconciles_measures(self, pipeline, cleaned_store):
        pipeline.load_kind(EntityKind.SALES_LINE)

        lines = cleaned_store.tables[EntityKind.SALES_LINE]
        assert [(l.quantity, l.unit_price, l.sales_amount) for l in lines] == [
            (2, 10, 20), (3, 5, 15), (1, 40, 40)
        ]
        assert lines[1].order_date is None
        assert lines[1].ship_date is None
        assert lines[2].order_num == ""
        assert lines[2].customer_id is None

    def test_erp_loads(self, pipeline, cleaned_store):
        for kind in (EntityKind.CUSTOMER_DEMO, EntityKind.LOCATION, EntityKind.PRODUCT_CATEGORY):
            pipeline.load_kind(kind)

        demos = cleaned_store.tables[EntityKind.CUSTOMER_DEMO]
        assert [d.customer_id for d in demos] == ["AW00011000", "AW00011001", "AW00011002"]
        assert [d.birth_date for d in demos] == [date(1971, 10, 6), None, None]
        assert [d.gender for d in demos] == ["Male", "Female", "Unknown"]

        locations = cleaned_store.tables[EntityKind.LOCATION]
        assert [l.country for l in locations] == ["Germany", "United States", "ZZ", "Unknown", "Unknown"]
        assert locations[0].customer_id == "AW00011000"

        categories = cleaned_store.tables[EntityKind.PRODUCT_CATEGORY]
        assert categories[1].category == "Bikes"
        assert categories[1].subcategory == "Mountain Bikes"

    def test_clock_read_once_per_load(self, pipeline, cleaned_store, fixed_clock, load_time):
        pipeline.load_kind(EntityKind.SALES_LINE)

        assert fixed_clock.calls == 1
        assert {l.loaded_at for l in cleaned_store.tables[EntityKind.SALES_LINE]} == {load_time}

    def test_read_failure_propagates_and_skips_write(self, bronze_rows, cleaned_store, fixed_clock):
        store = InMemoryRawStore(bronze_rows, failing={EntityKind.CUSTOMER})
        pipeline = SilverPipeline(raw_store=store, cleaned_store=cleaned_store, clock=fixed_clock)

        with pytest.raises(ConnectionError):
            pipeline.load_kind(EntityKind.CUSTOMER)

        assert cleaned_store.replace_calls == 0

    def test_write_failure_leaves_previous_generation(self, raw_store, fixed_clock):
        cleaned = InMemoryCleanedStore()
        SilverPipeline(raw_store=raw_store, cleaned_store=cleaned, clock=fixed_clock).load_kind(EntityKind.LOCATION)
        previous = list(cleaned.tables[EntityKind.LOCATION])

        cleaned.failing.add(EntityKind.LOCATION)
        with pytest.raises(IOError):
            SilverPipeline(raw_store=raw_store, cleaned_store=cleaned, clock=fixed_clock).load_kind(EntityKind.LOCATION)

        assert cleaned.tables[EntityKind.LOCATION] == previous


class TestRun:
    """Tests for multi-kind runs"""

    def test_loads_all_kinds(self, pipeline, cleaned_store, fixed_clock, load_time):
        report = pipeline.run()

        assert report.succeeded
        assert report.started_at == load_time
        assert [r.kind for r in report.results] == list(ALL_KINDS)
        assert set(cleaned_store.tables) == set(EntityKind)
        # One read per kind load plus the run start
        assert fixed_clock.calls == len(EntityKind) + 1

    def test_subset_of_kinds(self, pipeline, cleaned_store):
        report = pipeline.run([EntityKind.LOCATION, EntityKind.LOCATION, EntityKind.CUSTOMER])

        assert [r.kind for r in report.results] == [EntityKind.LOCATION, EntityKind.CUSTOMER]
        assert set(cleaned_store.tables) == {EntityKind.LOCATION, EntityKind.CUSTOMER}

    def test_failure_does_not_block_other_kinds(self, bronze_rows, cleaned_store, fixed_clock):
        store = InMemoryRawStore(bronze_rows, failing={EntityKind.PRODUCT})
        pipeline = SilverPipeline(raw_store=store, cleaned_store=cleaned_store, clock=fixed_clock)

        with pytest.raises(SilverLoadError) as exc_info:
            pipeline.run(max_workers=2)

        report = exc_info.value.report
        assert report.failed_kinds == [EntityKind.PRODUCT]
        assert "ConnectionError" in report.result_for(EntityKind.PRODUCT).error
        assert set(cleaned_store.tables) == set(EntityKind) - {EntityKind.PRODUCT}
        assert "product" in str(exc_info.value)

    def test_failure_reported_without_raising(self, bronze_rows, fixed_clock):
        cleaned = InMemoryCleanedStore(failing={EntityKind.SALES_LINE})
        pipeline = SilverPipeline(raw_store=InMemoryRawStore(bronze_rows), cleaned_store=cleaned, clock=fixed_clock)

        report = pipeline.run(raise_on_failure=False)

        assert not report.succeeded
        assert report.failed_kinds == [EntityKind.SALES_LINE]
        assert report.result_for(EntityKind.CUSTOMER).status == "success"

    def test_rerun_is_identical_except_load_timestamp(self, raw_store):
        first = InMemoryCleanedStore()
        second = InMemoryCleanedStore()
        later = FixedClock(datetime(2025, 11, 18, 8, 30, tzinfo=timezone.utc))

        SilverPipeline(raw_store, first, clock=FixedClock(datetime(2025, 11, 17, tzinfo=timezone.utc))).run()
        SilverPipeline(raw_store, second, clock=later).run()

        for kind in EntityKind:
            assert [r.model_dump(exclude={"loaded_at"}) for r in first.tables[kind]] == [
                r.model_dump(exclude={"loaded_at"}) for r in second.tables[kind]
            ]

"""
Silver load pipeline orchestration.

Coordinates the flow per entity kind: read raw → normalize →
{deduplicate | build intervals | reconcile measures} → full replace
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Tuple

from src.batch.readers import RawStore
from src.batch.writers import CleanedStore
from src.core.config import PipelineConfig
from src.core.models import EntityKind, LoadResult, RawRecord, RunReport, SilverRecord
from src.core.normalizers import RecordNormalizer
from src.core.transforms import build_intervals, deduplicate_latest, reconcile_all
from src.observability.logger import get_logger, log_operation
from src.observability.metrics import MetricsCollector

logger = get_logger(__name__)

RunClock = Callable[[], datetime]

ALL_KINDS: tuple[EntityKind, ...] = tuple(EntityKind)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SilverLoadError(RuntimeError):
    """Raised when one or more entity kind loads failed during a run."""

    def __init__(self, report: RunReport):
        self.report = report
        failures = ", ".join(
            f"{r.kind.value}: {r.error}" for r in report.results if r.status == "failed"
        )
        super().__init__(f"Silver load failed for {len(report.failed_kinds)} kind(s): {failures}")


class SilverPipeline:
    """
    Orchestrates the bronze -> silver load.

    Flow for each entity kind:
    1. Read the full raw snapshot from the raw store
    2. Normalize every row (field anomalies degrade, rows without identity drop)
    3. Customers: keep the latest version per id
       Products: compute validity intervals per product key
       Sales lines: reconcile quantity, unit price and sales amount
    4. Replace the kind's cleaned table with the new snapshot

    Kinds share no state, so run() loads them concurrently.
    """

    def __init__(
        self,
        raw_store: RawStore,
        cleaned_store: CleanedStore,
        config: PipelineConfig | None = None,
        clock: RunClock = utc_now,
        metrics: MetricsCollector | None = None
    ):
        """
        Initialize silver pipeline.

        Args:
            raw_store: Source of raw snapshots
            cleaned_store: Target accepting full replaces
            config: Pipeline configuration (defaults apply when omitted)
            clock: Returns the load timestamp; read once per kind load and once for the run start
            metrics: Metrics collector
        """
        self.raw_store = raw_store
        self.cleaned_store = cleaned_store
        self.config = config or PipelineConfig()
        self.clock = clock
        self.metrics = metrics or MetricsCollector()

    def transform(
        self,
        kind: EntityKind,
        raw_records: Iterable[RawRecord],
        loaded_at: datetime
    ) -> Tuple[List[SilverRecord], dict[str, int]]:
        """
        Turn one kind's raw snapshot into its cleaned snapshot (no I/O).

        Args:
            kind: Entity kind of every raw record
            raw_records: Raw snapshot
            loaded_at: Load timestamp stamped on every output record

        Returns:
            Tuple of (cleaned_records, dropped_counts_by_reason)
        """
        normalizer = RecordNormalizer(self.config, loaded_at)
        normalized = []
        missing_identity = 0
        for raw in raw_records:
            candidate = normalizer.normalize(raw)
            if candidate is None:
                missing_identity += 1
                continue
            normalized.append(candidate)

        dropped = {"missing_identity": missing_identity}

        if kind == EntityKind.CUSTOMER:
            records = deduplicate_latest(normalized)
            dropped["superseded"] = len(normalized) - len(records)
        elif kind == EntityKind.PRODUCT:
            records = build_intervals(normalized)
        elif kind == EntityKind.SALES_LINE:
            records, stats = reconcile_all(normalized)
            self.metrics.record_repairs(stats.unit_price_repaired, stats.sales_amount_repaired)
        else:
            records = normalized

        return records, dropped

    def load_kind(self, kind: EntityKind) -> LoadResult:
        """
        Load one entity kind end to end.

        Args:
            kind: Entity kind to load

        Returns:
            LoadResult describing the successful load

        Raises:
            StoreReadError, StoreWriteError: On raw read or cleaned write
                failure; the cleaned table keeps its previous contents
        """
        loaded_at = self.clock()
        with log_operation("Load silver table", logger=logger, kind=kind.value) as op:
            try:
                raw_records = self.raw_store.read(kind)
                records, dropped = self.transform(kind, raw_records, loaded_at)
                written = self.cleaned_store.replace_all(kind, records)
            except Exception:
                self.metrics.record_failure(kind.value, op.elapsed)
                raise

            duration = op.elapsed
            self.metrics.record_load(
                kind.value,
                rows_read=len(raw_records),
                rows_written=written,
                rows_dropped=dropped,
                duration_seconds=duration,
            )
            logger.info(
                f"Loaded {written} {kind.value} rows from {len(raw_records)} raw rows",
                extra={"kind": kind.value, "rows_read": len(raw_records), "rows_written": written, **dropped}
            )

        return LoadResult(
            kind=kind,
            status="success",
            rows_read=len(raw_records),
            rows_written=written,
            rows_dropped=sum(dropped.values()),
            loaded_at=loaded_at,
            duration_seconds=duration,
        )

    def run(
        self,
        kinds: Iterable[EntityKind] | None = None,
        max_workers: int | None = None,
        raise_on_failure: bool = True
    ) -> RunReport:
        """
        Load several entity kinds concurrently.

        A failing kind never blocks or rolls back the others; every kind
        runs to completion before failures are reported.

        Args:
            kinds: Kinds to load (default: all six)
            max_workers: Thread count (default: one per kind)
            raise_on_failure: Raise SilverLoadError after the run if any kind failed

        Returns:
            RunReport with one LoadResult per kind, in requested order

        Raises:
            SilverLoadError: If raise_on_failure and any kind failed
        """
        kinds = list(dict.fromkeys(kinds or ALL_KINDS))
        report = RunReport(started_at=self.clock())
        if not kinds:
            return report

        with ThreadPoolExecutor(
            max_workers=max_workers or len(kinds),
            thread_name_prefix="silver-load"
        ) as executor:
            futures = {kind: executor.submit(self.load_kind, kind) for kind in kinds}

            for kind, future in futures.items():
                try:
                    report.results.append(future.result())
                except Exception as e:
                    # Already logged with traceback by log_operation
                    report.results.append(
                        LoadResult(kind=kind, status="failed", error=f"{type(e).__name__}: {e}")
                    )

        logger.info(
            f"Silver run finished: {len(kinds) - len(report.failed_kinds)}/{len(kinds)} kinds loaded",
            extra={"failed_kinds": [k.value for k in report.failed_kinds]}
        )

        if raise_on_failure and not report.succeeded:
            raise SilverLoadError(report)
        return report

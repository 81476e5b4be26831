"""
Raw (bronze) store readers.

A raw store returns the full current snapshot of one entity kind as
RawRecords. SparkRawStore reads bronze tables from the Spark catalog, or
CSV snapshots named after those tables when a directory is given.
"""

from pathlib import Path
from typing import Protocol

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col

from src.core.config import PipelineConfig
from src.core.models import EntityKind, RawRecord
from src.observability.logger import get_logger

from .csv_reader import CSVReader

logger = get_logger(__name__)


class StoreReadError(RuntimeError):
    """Raised when the raw snapshot for an entity kind cannot be read."""

    def __init__(self, kind: EntityKind, message: str):
        self.kind = kind
        super().__init__(f"[{kind.value}] raw read failed: {message}")


class RawStore(Protocol):
    """Anything that can return the raw snapshot of an entity kind."""

    def read(self, kind: EntityKind) -> list[RawRecord]:
        ...


class SparkRawStore:
    """
    Reads bronze snapshots through Spark.

    Every column is cast to string before collecting, so downstream
    normalization always sees text. Rows are numbered in collect order,
    which is the ingestion order used for tie-breaking.
    """

    def __init__(
        self,
        spark: SparkSession,
        config: PipelineConfig,
        csv_root: str | Path | None = None
    ):
        """
        Initialize raw store.

        Args:
            spark: Active Spark session
            config: Pipeline configuration (bronze table names)
            csv_root: Optional directory of <table>.csv snapshots; when
                unset, tables are read from the Spark catalog
        """
        self.spark = spark
        self.config = config
        self.csv_root = Path(csv_root) if csv_root else None
        self.csv_reader = CSVReader(spark)

    def read(self, kind: EntityKind) -> list[RawRecord]:
        """
        Read all current raw rows for a kind.

        Args:
            kind: Entity kind to read

        Returns:
            RawRecords in ingestion order

        Raises:
            StoreReadError: If the table or file cannot be read
        """
        try:
            df = self._load_dataframe(kind)
            df = df.select([col(c).cast("string").alias(c) for c in df.columns])
            rows = df.collect()
        except Exception as e:
            raise StoreReadError(kind, str(e)) from e

        logger.debug(f"Read {len(rows)} raw rows for {kind.value}")
        return [
            RawRecord(kind=kind, values=row.asDict(), sequence=idx)
            for idx, row in enumerate(rows)
        ]

    def _load_dataframe(self, kind: EntityKind) -> DataFrame:
        table = self.config.bronze_tables[kind]
        if self.csv_root is not None:
            path = self.csv_root / f"{table}.csv"
            if not path.exists():
                raise FileNotFoundError(f"Bronze snapshot not found: {path}")
            return self.csv_reader.read(str(path))
        return self.spark.table(self.config.bronze_table(kind))

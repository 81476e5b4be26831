"""
CSV reader for bronze snapshots using Spark.

Bronze data is untyped text, so schema inference is disabled and every
column is read as a string.
"""

from pyspark.sql import DataFrame, SparkSession


class CSVReader:
    """
    Reads bronze CSV snapshots with every column as a string.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(
        self,
        file_path: str,
        header: bool = True,
        delimiter: str = ",",
    ) -> DataFrame:
        """
        Read CSV file (or directory of CSV parts) into a Spark DataFrame.

        Args:
            file_path: Path to CSV file or directory
            header: Whether CSV has header row
            delimiter: Field delimiter

        Returns:
            Spark DataFrame with string columns
        """
        return self.spark.read \
            .option("header", str(header).lower()) \
            .option("delimiter", delimiter) \
            .option("inferSchema", "false") \
            .option("mode", "PERMISSIVE") \
            .csv(file_path)

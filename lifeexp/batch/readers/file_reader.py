"""
Format dispatch for dataset inputs (CSV, JSON lines, Parquet).
"""

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

from lifeexp.observability.logger import get_logger

from .csv_reader import CSVReader

logger = get_logger(__name__)

SUPPORTED_FORMATS = ("csv", "json", "parquet")


class FileReader:
    """
    Reads a dataset file in any of SUPPORTED_FORMATS.

    The result keeps the source column names; DatasetStore.from_dataframe
    maps them onto the canonical schema.
    """

    def __init__(self, spark: SparkSession):
        self.spark = spark
        self.csv_reader = CSVReader(spark)
        self._readers = {
            "csv": self.csv_reader.read,
            "json": self._read_json,
            "parquet": self._read_parquet,
        }

    def read(
        self,
        file_path: str,
        file_format: str = "csv",
        schema: StructType | None = None,
        **options
    ) -> DataFrame:
        """
        Read file_path with the reader for file_format.

        Args:
            file_path: Path to file or directory
            file_format: One of SUPPORTED_FORMATS, case-insensitive
            schema: Optional explicit schema (ignored for Parquet)
            **options: Passed to the format reader

        Raises:
            ValueError: If file_format is not supported
        """
        read = self._readers.get(file_format.lower())
        if read is None:
            raise ValueError(
                f"Unsupported file format: {file_format}. Expected one of {', '.join(SUPPORTED_FORMATS)}"
            )

        logger.debug("Reading dataset", extra={"file_path": file_path, "file_format": file_format})
        return read(file_path, schema=schema, **options)

    def _read_json(self, file_path: str, schema: StructType | None = None, **options) -> DataFrame:
        reader = self.spark.read.options(**options)
        if schema is not None:
            reader = reader.schema(schema)
        return reader.json(file_path)

    def _read_parquet(self, file_path: str, schema: StructType | None = None, **options) -> DataFrame:
        return self.spark.read.options(**options).parquet(file_path)

"""
Batch writer for the cleaned dataset and the analytics result tables.
"""

from pathlib import Path

from pyspark.sql import DataFrame

from lifeexp.core.models import CleaningReport
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore

logger = get_logger(__name__)

CLEANED_DATASET = "cleaned"
REPORT_FILE = "cleaning_report.json"
OUTPUT_FORMATS = ("csv", "parquet")


class ResultWriter:
    """
    Writes each table into its own directory under output_dir.

    Layout:
        <output_dir>/cleaned/            cleaned dataset
        <output_dir>/<TableName>/        one directory per result table
        <output_dir>/cleaning_report.json
    """

    def __init__(self, output_dir: str | Path, output_format: str = "csv"):
        """
        Args:
            output_dir: Base directory, created if missing
            output_format: "csv" (single file with header) or "parquet"

        Raises:
            ValueError: If output format is unsupported
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self.output_dir = Path(output_dir)
        self.output_format = output_format

    def write_dataframe(self, df: DataFrame, name: str) -> str:
        """
        Write one DataFrame, replacing any previous output of the same name.

        Returns:
            Path of the written directory
        """
        path = str(self.output_dir / name)
        writer = df.coalesce(1).write.mode("overwrite")
        if self.output_format == "csv":
            writer.option("header", "true").csv(path)
        else:
            writer.parquet(path)
        logger.debug(f"Wrote {name} to {path}")
        return path

    def write_store(self, store: DatasetStore) -> str:
        """Write the cleaned dataset ordered by country and year."""
        return self.write_dataframe(store.scan().orderBy("country", "year", "row_id"), CLEANED_DATASET)

    def write_tables(self, tables: dict[str, DataFrame]) -> dict[str, str]:
        """
        Write every result table.

        Returns:
            Table name -> written path
        """
        paths = {name: self.write_dataframe(df, name) for name, df in tables.items()}
        logger.info(f"Wrote {len(paths)} result tables to {self.output_dir}")
        return paths

    def write_report(self, report: CleaningReport) -> str:
        """Write the cleaning report as JSON."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / REPORT_FILE
        path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        return str(path)

"""
CSV reader for the raw life expectancy export.
"""

from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType


class CSVReader:
    """
    Reads delimited exports with a header row.

    Every column comes back as a string unless a schema is given; casting
    to the dataset types is done by conform_dataframe, which turns
    unparseable cells into nulls instead of failing the read. Whitespace
    around cells is dropped; headers such as "Life expectancy " are
    matched later ignoring case, spaces and punctuation.
    """

    def __init__(self, spark: SparkSession):
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: Optional[StructType] = None,
        header: bool = True,
        delimiter: str = ",",
        null_value: str = "",
        encoding: str = "UTF-8",
    ) -> DataFrame:
        """
        Read a CSV file or directory of CSV parts.

        Args:
            file_path: File or directory path
            schema: Explicit schema; None reads every column as a string
            header: First line holds column names
            delimiter: Field separator
            null_value: Cell text read as null
            encoding: File encoding

        Returns:
            Spark DataFrame with the file's own column names
        """
        reader = self.spark.read.options(
            header=str(header).lower(),
            sep=delimiter,
            nullValue=null_value,
            encoding=encoding,
            mode="PERMISSIVE",
            ignoreLeadingWhiteSpace="true",
            ignoreTrailingWhiteSpace="true",
        )
        if schema is not None:
            reader = reader.schema(schema)
        return reader.csv(file_path)

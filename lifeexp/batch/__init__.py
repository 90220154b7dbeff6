"""
Spark batch processing module.
"""

from .pipeline import LifeExpectancyPipeline
from .readers import CSVReader, FileReader
from .writers import ResultWriter

__all__ = [
    "LifeExpectancyPipeline",
    "CSVReader",
    "FileReader",
    "ResultWriter",
]

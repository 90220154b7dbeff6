"""
Batch data writers.
"""

from .result_writer import CLEANED_DATASET, OUTPUT_FORMATS, REPORT_FILE, ResultWriter

__all__ = [
    "CLEANED_DATASET",
    "OUTPUT_FORMATS",
    "REPORT_FILE",
    "ResultWriter",
]

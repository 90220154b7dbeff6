"""
Logging, metrics and lineage for the pipeline.
"""

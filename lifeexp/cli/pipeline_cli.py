"""
Command-line interface for the cleaning and analytics pipeline.

Usage:
    python -m lifeexp.cli.pipeline_cli clean --input <file_path> --output <dir> [options]
    python -m lifeexp.cli.pipeline_cli analyze --input <file_path> --output <dir> [options]
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from pyspark.sql import SparkSession

from lifeexp.batch.pipeline import LifeExpectancyPipeline
from lifeexp.batch.readers import SUPPORTED_FORMATS
from lifeexp.batch.writers import OUTPUT_FORMATS
from lifeexp.core.config import PipelineConfig, load_pipeline_config
from lifeexp.observability.lineage import LineageTracker
from lifeexp.observability.logger import get_logger
from lifeexp.observability.metrics import start_metrics_server, write_metrics_file

logger = get_logger(__name__)


def create_spark_session(app_name: str = "LifeExpectancyPipeline") -> SparkSession:
    """
    Create Spark session for batch processing.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.sql.adaptive.coalescePartitions.enabled", "true") \
        .getOrCreate()

    return spark


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    config = load_pipeline_config(args.config)
    return config.with_overrides(
        gdp_threshold=args.gdp_threshold,
        interpolation_max_passes=args.max_interpolation_passes,
        ambiguous_status_policy=args.ambiguous_status,
        merge_duplicates=False if args.no_merge_duplicates else None,
        validation_rules_path=args.validation_rules,
    )


def run_command(args: argparse.Namespace) -> int:
    """
    Execute the clean or analyze command.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.metrics_port:
        start_metrics_server(args.metrics_port)
        logger.info(f"Metrics server listening on port {args.metrics_port}")

    logger.info(f"Starting {args.command} for dataset: {config.dataset_id}")
    logger.info(f"Input file: {args.input}")

    logger.info("Creating Spark session...")
    spark = create_spark_session(f"LifeExpectancy-{args.command}")

    lineage_tracker = LineageTracker(dataset_id=config.dataset_id, sink_path=args.lineage)

    try:
        pipeline = LifeExpectancyPipeline(spark, config=config, lineage_tracker=lineage_tracker)
        result = pipeline.process_file(
            file_path=str(input_path),
            output_dir=args.output,
            file_format=args.format,
            output_format=args.output_format,
            run_analytics=args.command == "analyze",
        )

        report = result["report"]
        logger.info("=" * 60)
        logger.info("PROCESSING COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Total records: {report.total_records}")
        logger.info(f"Cleaned records: {report.cleaned_records}")
        logger.info(f"Duplicates removed: {report.duplicates_removed}")
        logger.info(f"Statuses imputed: {report.statuses_imputed}")
        logger.info(f"Life expectancy values imputed: {report.life_expectancy_imputed}")
        logger.info(f"Unresolved status / life expectancy: "
                    f"{report.unresolved_status} / {report.unresolved_life_expectancy}")
        if report.ambiguous_status_countries:
            logger.info(f"Ambiguous status countries: {', '.join(report.ambiguous_status_countries)}")
        for table, rows in result["table_rows"].items():
            logger.info(f"{table}: {rows} rows")
        logger.info(f"Outputs written to: {args.output}")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Error during {args.command}: {e}", exc_info=True)
        return 1
    finally:
        lineage_tracker.flush()
        if args.metrics_file:
            write_metrics_file(args.metrics_file)
            logger.info(f"Metrics written to: {args.metrics_file}")
        spark.stop()

    return 0


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        required=True,
        help="Path to input file"
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Directory for the cleaned dataset, result tables and report"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to pipeline configuration YAML file"
    )
    parser.add_argument(
        "--validation-rules",
        default=None,
        help="Path to validation rules YAML file (overrides the config file)"
    )
    parser.add_argument(
        "--format",
        default="csv",
        choices=list(SUPPORTED_FORMATS),
        help="Input file format (default: csv)"
    )
    parser.add_argument(
        "--output-format",
        default="csv",
        choices=list(OUTPUT_FORMATS),
        help="Output format (default: csv)"
    )
    parser.add_argument(
        "--gdp-threshold",
        type=float,
        default=None,
        help="GDP value splitting the high and low buckets (default: 1500)"
    )
    parser.add_argument(
        "--max-interpolation-passes",
        type=int,
        default=None,
        help="Life expectancy interpolation passes (default: 1)"
    )
    parser.add_argument(
        "--ambiguous-status",
        default=None,
        choices=["flag", "raise"],
        help="What to do with countries listed under both statuses (default: flag)"
    )
    parser.add_argument(
        "--no-merge-duplicates",
        action="store_true",
        help="Drop duplicates without filling the survivor's missing fields"
    )
    parser.add_argument(
        "--lineage",
        default=None,
        help="Write per-record lineage entries to this JSON lines file"
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port while running"
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write a Prometheus textfile snapshot of the run's metrics here"
    )


def main(argv=None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="World life expectancy cleaning and analytics pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clean a CSV file
  python -m lifeexp.cli.pipeline_cli clean --input data/WorldLifeExpectancy.csv --output out/

  # Clean and compute the analytics tables
  python -m lifeexp.cli.pipeline_cli analyze --input data/WorldLifeExpectancy.csv --output out/ \\
      --config config/pipeline.yaml

  # Iterate interpolation to a fixed point and abort on conflicting statuses
  python -m lifeexp.cli.pipeline_cli clean --input data/WorldLifeExpectancy.csv --output out/ \\
      --max-interpolation-passes 5 --ambiguous-status raise
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    clean_parser = subparsers.add_parser("clean", help="Clean a dataset and write it out")
    add_common_arguments(clean_parser)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Clean a dataset and write the analytics result tables"
    )
    add_common_arguments(analyze_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return run_command(args)


if __name__ == "__main__":
    sys.exit(main())

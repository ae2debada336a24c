#!/usr/bin/env python3
"""
CLI for streaming access log objects into Elasticsearch/OpenSearch.

Reads the same settings as the Lambda handler (environment variables or a
YAML file named by ACCESS_LOG_INDEXER_CONFIG) and indexes one or more
gzip log objects from S3, or a local .gz file.

Usage:
    # ALB log object from S3
    python scripts/index_logs.py --bucket my-logs --key AWSLogs/.../file.log.gz

    # CloudFront log object
    python scripts/index_logs.py --log-format cdn --bucket cf-logs --key E2ABC.2024-01-15-10.abcd.gz

    # Local file (no S3 access needed)
    python scripts/index_logs.py --input data/alb.log.gz --endpoint search-domain.eu-west-1.es.amazonaws.com

    # Lower concurrency
    python scripts/index_logs.py --bucket my-logs --key a.gz --key b.gz --max-in-flight 10
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from access_log_indexer.config import SUPPORTED_LOG_FORMATS, get_settings
from access_log_indexer.handler import process_sources
from access_log_indexer.ingestion import SourceObject
from access_log_indexer.pipeline import setup_logging
from access_log_indexer.storage import get_store

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """Parse a strictly positive integer argument."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stream gzip access logs into Elasticsearch/OpenSearch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # ALB log object from S3
  python scripts/index_logs.py --bucket my-logs --key AWSLogs/123/elasticloadbalancing/file.log.gz

  # Local CloudFront log file
  python scripts/index_logs.py --log-format cdn --input data/E2ABC.2024-01-15-10.abcd.gz
        """,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=Path,
        help="Local gzip log file",
    )
    source.add_argument(
        "--bucket",
        help="S3 bucket holding the log objects (use with --key)",
    )
    parser.add_argument(
        "--key",
        action="append",
        default=[],
        help="S3 object key (repeatable)",
    )
    parser.add_argument(
        "--config",
        help="YAML config file (default: ACCESS_LOG_INDEXER_CONFIG or environment)",
    )
    parser.add_argument(
        "--endpoint",
        help="Override the Elasticsearch/OpenSearch endpoint",
    )
    parser.add_argument(
        "--log-format",
        choices=SUPPORTED_LOG_FORMATS,
        help="Override the log format",
    )
    parser.add_argument(
        "--max-in-flight",
        type=positive_int,
        help="Maximum concurrent index requests per object",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the results as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.bucket and not args.key:
        parser.error("--bucket requires at least one --key")

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = get_settings(args.config)
    overrides = {}
    if args.endpoint:
        overrides["es_endpoint"] = args.endpoint
    if args.log_format:
        overrides["log_format"] = args.log_format
        # Names derived from the configured format follow the new one;
        # explicitly configured names are kept
        if settings.index_prefix == f"{settings.log_format}logs":
            overrides["index_prefix"] = ""
        if settings.doc_type == f"{settings.log_format}-log":
            overrides["doc_type"] = ""
    if args.max_in_flight:
        overrides["max_in_flight"] = args.max_in_flight
    if overrides:
        settings = replace(settings, **overrides)

    errors = settings.validate()
    if errors:
        for error in errors:
            print(f"❌ {error}")
        return 1

    if args.input:
        path = args.input.resolve()
        store = get_store("local", root=path.parent)
        sources = [SourceObject(bucket="", key=path.name)]
    else:
        store = get_store("s3")
        sources = [SourceObject(bucket=args.bucket, key=key) for key in args.key]

    target = settings.index_target()

    print()
    print("📥 Access Log Indexing")
    print("=" * 50)
    print(f"  Format: {settings.log_format}")
    print(f"  Endpoint: {settings.endpoint_url}")
    print(f"  Index: {target.path}")
    print(f"  Objects: {len(sources)}")
    print(f"  Max In Flight: {settings.max_in_flight}")
    print()

    try:
        results = asyncio.run(process_sources(sources, settings, target, store=store))
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        return 130

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        print("📊 Indexing Summary")
        print("=" * 50)
        for result in results:
            status = "✅" if result.success else "❌"
            print(f"  {status} {result.source}")
            print(
                f"     {result.completed_submissions - result.failed_submissions:,} "
                f"of {result.total_lines:,} records indexed"
            )
            if result.parse_errors:
                print(f"     Unparseable lines: {result.parse_errors:,}")
            if result.duration_seconds is not None:
                print(f"     Duration: {result.duration_seconds:.1f}s")
            if result.error:
                print(f"     Error: {result.error}")

    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())

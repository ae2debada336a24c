"""
Log line parsers, one per supported log format.

Importing this package registers every parser with the ParserRegistry:
- alb: AWS Application Load Balancer access logs
- cdn: AWS CloudFront standard (web) access logs

Usage:
    from access_log_indexer.ingestion import get_parser

    parser = get_parser('alb')
    doc = parser.parse(line)
"""

from .alb_parser import ALBLogParser
from .cdn_parser import CloudFrontLogParser

__all__ = [
    "ALBLogParser",
    "CloudFrontLogParser",
]

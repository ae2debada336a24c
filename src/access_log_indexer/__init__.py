"""
Stream compressed access logs from S3 into Elasticsearch/OpenSearch.

Log objects are decompressed, split into lines, parsed (ALB or CloudFront
format) and indexed one signed request per line, without holding a whole
file in memory.
"""

__version__ = "1.0.0"

"""
Constants for log indexing defaults and wire details.
"""

# =============================================================================
# Log Formats
# =============================================================================

LOG_FORMAT_ALB = "alb"
LOG_FORMAT_CDN = "cdn"
SUPPORTED_LOG_FORMATS = (LOG_FORMAT_ALB, LOG_FORMAT_CDN)
DEFAULT_LOG_FORMAT = LOG_FORMAT_ALB

# =============================================================================
# AWS / Indexing Endpoint
# =============================================================================

DEFAULT_REGION = "eu-west-1"

# Service name the SigV4 signature is bound to
ES_SERVICE_NAME = "es"

# Date suffix appended to the index prefix, e.g. alblogs-2016.03.31
INDEX_DATE_FORMAT = "%Y.%m.%d"

INDEX_CONTENT_TYPE = "application/json"

# =============================================================================
# Streaming & Concurrency
# =============================================================================

# Maximum indexing requests outstanding per source object
DEFAULT_MAX_IN_FLIGHT = 50

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

# Bytes requested from storage per read
DEFAULT_READ_CHUNK_SIZE = 64 * 1024

# =============================================================================
# Environment Variables
# =============================================================================

# Preferred name first, legacy Lambda configuration name second
ENV_ES_ENDPOINT = ("ES_ENDPOINT", "es_endpoint")
ENV_REGION = ("AWS_REGION_NAME", "region")
ENV_LOG_FORMAT = ("LOG_FORMAT", "logtype")
ENV_INDEX_PREFIX = ("INDEX_PREFIX", "index")
ENV_DOC_TYPE = ("DOC_TYPE", "doctype")
ENV_MAX_IN_FLIGHT = ("MAX_IN_FLIGHT",)
ENV_REQUEST_TIMEOUT = ("REQUEST_TIMEOUT_SECONDS",)
ENV_READ_CHUNK_SIZE = ("READ_CHUNK_SIZE",)
ENV_CONFIG_PATH = "ACCESS_LOG_INDEXER_CONFIG"

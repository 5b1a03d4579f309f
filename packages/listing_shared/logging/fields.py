"""Canonical structured logging field names.

Keeping names in one module prevents drift between the cache service, the
HTTP adapter and the CLI.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Cache request fields.
CACHE_KEY = "cache_key"
LOGICAL_PATH = "logical_path"
CACHE_STATUS = "cache_status"
HTTP_METHOD = "http_method"

# Origin attempt fields.
ORIGIN_URL = "origin_url"
SOURCE_ORIGIN = "source_origin"
ATTEMPT = "attempt"
STATUS_CODE = "status_code"

# Process-level fields seeded once at startup.
SERVICE = "service"
ENVIRONMENT = "environment"
PRIMARY_ORIGIN = "primary_origin"

# Fields a call site may pass per record through ``extra=``.
RECORD_FIELDS = (
    LOGICAL_PATH,
    CACHE_STATUS,
    HTTP_METHOD,
    ORIGIN_URL,
    SOURCE_ORIGIN,
    ATTEMPT,
    STATUS_CODE,
)

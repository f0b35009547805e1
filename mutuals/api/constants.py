"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# Response cache
CACHEABLE_METHOD = "GET"

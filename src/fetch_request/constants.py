"""HTTP constants for the fetch-request layer.

Centralizes defaults shared by the request builder, the validator and
the orchestrator.
"""

# Acceptable status code range (inclusive on both ends)
DEFAULT_STATUS_CODE_MIN = 200
DEFAULT_STATUS_CODE_MAX = 299

# Header defaults
HEADER_ACCEPT = "Accept"
HEADER_CONTENT_TYPE = "Content-Type"
DEFAULT_MEDIA_TYPE = "application/json"

# Retry defaults for GET requests
DEFAULT_RETRY_ATTEMPTS = 0
DEFAULT_RETRY_DELAY_SECONDS = 3.0

# Method names normalized case-insensitively, as the fetch primitive does
NORMALIZED_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "POST", "PUT"})

# Methods a request may never be constructed with
FORBIDDEN_METHODS = frozenset({"CONNECT", "TRACE", "TRACK"})

# Headers stripped when credentials="omit"
CREDENTIAL_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization"})

# Referrer values that never produce a Referer header
NO_REFERRER_VALUES = frozenset({"", "about:client"})

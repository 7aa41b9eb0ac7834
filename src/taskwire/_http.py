"""Small HTTP-related constants shared across taskwire.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

# Inclusive range of status codes classified as success.
SUCCESS_STATUS_MIN = 200
SUCCESS_STATUS_MAX = 204

# Retryable status codes used by the caller-side retry helper.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

JSON_CONTENT_TYPE = "application/json"

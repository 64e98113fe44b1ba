"""
Centralized error handling for store failures surfaced through the API.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException
from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeoutError

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

MSG_STORE_UNAVAILABLE = "Parking data store is temporarily unavailable. Please retry shortly."
MSG_INTERNAL_ERROR = "Internal server error"

# HTTP status codes for known error categories
STATUS_SERVICE_UNAVAILABLE = 503  # connection drop, timeout, pool exhausted
STATUS_INTERNAL_ERROR = 500


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail_message)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _is_transient_store_error(exc: Exception) -> bool:
    if isinstance(exc, (OperationalError, PoolTimeoutError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


# List of (predicate, status_code, detail). First match wins.
STORE_ERROR_RULES: list[tuple[Callable[[Exception], bool], int, str]] = [
    (_is_transient_store_error, STATUS_SERVICE_UNAVAILABLE, MSG_STORE_UNAVAILABLE),
]


def store_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception raised while reading or writing parking data into an HTTPException.
    Uses STORE_ERROR_RULES for known error types; otherwise returns a generic 500 so
    driver messages never reach clients.
    """
    for predicate, status_code, detail in STORE_ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=MSG_INTERNAL_ERROR)

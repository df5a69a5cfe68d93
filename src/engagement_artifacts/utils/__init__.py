"""Shared utilities: logging, timestamps and remote HTTP calls."""

from ._http import TRANSIENT_STATUS_CODES, raise_for_remote_status, send_with_retry
from ._logging import DEBUG_ENV, create_service_logger
from ._time import not_before, utc_now

__all__ = [
    "DEBUG_ENV",
    "TRANSIENT_STATUS_CODES",
    "create_service_logger",
    "not_before",
    "raise_for_remote_status",
    "send_with_retry",
    "utc_now",
]

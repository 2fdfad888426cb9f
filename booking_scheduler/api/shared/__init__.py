"""
Shared utilities for Booking Scheduler API.

Security helpers (rate limiting, honeypot, text cleanup, owner access) and
argument validators used by every endpoint.
"""

from booking_scheduler.api.security import (
    # Rate limiting
    RATE_LIMITS,
    check_rate_limit,
    get_client_ip,
    # Security
    check_honeypot,
    require_booking_owner,
    # Sanitization
    clean_text,
)

from .validators import (
    parse_date_arg,
    parse_instant_arg,
    validate_docname,
    validate_year_month,
)

__all__ = [
    "RATE_LIMITS",
    "check_rate_limit",
    "get_client_ip",
    "check_honeypot",
    "require_booking_owner",
    "clean_text",
    "parse_date_arg",
    "parse_instant_arg",
    "validate_docname",
    "validate_year_month",
]

"""
Booking Scheduler API

Structure:
    api/
    ├── __init__.py              # This file
    ├── bookings/                # Bookings domain
    │   └── __init__.py          # Re-exports from booking_api
    ├── shared/                  # Shared utilities
    │   ├── __init__.py          # Re-exports security helpers + validators
    │   └── validators.py        # Booking-specific validators
    ├── booking_api.py           # All endpoints
    └── security.py              # Rate limiting, honeypot, owner access

Usage:
    frappe.call("booking_scheduler.api.bookings.get_available_slots", ...)
    frappe.call("booking_scheduler.api.booking_api.get_available_slots", ...)
"""

from . import bookings
from . import shared

__all__ = [
    "bookings",
    "shared",
]

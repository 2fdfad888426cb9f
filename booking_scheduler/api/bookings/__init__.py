"""
Bookings API Domain

Handles event type lookup, availability, booking submission and the owner's
booking management.
"""

# Re-export endpoints from booking_api for new-style imports
from booking_scheduler.api.booking_api import (
    # Event types
    get_event_types,
    get_event_type,
    # Availability
    get_bookable_dates,
    get_available_slots,
    # Attendee
    submit_booking,
    get_calendar_link,
    # Owner
    get_bookings,
    get_booking_summary,
    cancel_booking,
    reschedule_booking,
)

__all__ = [
    "get_event_types",
    "get_event_type",
    "get_bookable_dates",
    "get_available_slots",
    "submit_booking",
    "get_calendar_link",
    "get_bookings",
    "get_booking_summary",
    "cancel_booking",
    "reschedule_booking",
]

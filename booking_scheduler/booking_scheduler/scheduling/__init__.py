"""
Scheduling Services Module

This module provides core business logic for booking scheduling:
- Data model (models.py) and errors (errors.py)
- Timezone conversion and formatting (timezones.py)
- Availability rule resolution (availability.py)
- Overlap detection (overlap.py)
- Slot generation for UI (slots.py)
- Booking admission, cancellation, rescheduling (admission.py)
- Owner booking list filters and counters (booking_list.py)
- Store interface and in-memory store (store.py), Frappe store (frappe_store.py)

None of these modules read the clock or log; "now" and the owner's
timezone are always passed in.
"""

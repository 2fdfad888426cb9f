"""
Video Calls Module

Provides adapters that produce the meeting link stored on a booking:
- Base adapter interface (base.py)
- Factory for getting the right adapter by location type (factory.py)
- Google Meet implementation (google_meet.py)
- Zoom implementation (zoom.py)
- Phone / in-person (no_link.py)
"""

"""
Google Meet Adapter

Placeholder Meet links; no Google Calendar API calls are made.
"""

from .base import PlaceholderLinkAdapter


class GoogleMeetAdapter(PlaceholderLinkAdapter):
	DEFAULT_BASE_URL = "https://meet.google.com"

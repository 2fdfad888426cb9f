"""
Zoom Adapter

Placeholder Zoom join links.
"""

from .base import PlaceholderLinkAdapter


class ZoomAdapter(PlaceholderLinkAdapter):
	DEFAULT_BASE_URL = "https://zoom.us/j"
	ID_PREFIX = "zoom-mock-"

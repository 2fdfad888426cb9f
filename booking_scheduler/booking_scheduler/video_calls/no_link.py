"""
No-link Adapter

Phone and in-person event types carry no meeting link.
"""

from typing import Dict, Any
from .base import VideoCallAdapter


class NoLinkAdapter(VideoCallAdapter):
	"""Adapter para reuniones por teléfono o presenciales."""

	def create_meeting(self, event_type: Any, booking_id: str) -> Dict[str, Any]:
		return {"meeting_url": "", "meeting_id": None}

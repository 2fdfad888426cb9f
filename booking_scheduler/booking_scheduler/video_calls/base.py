"""
Base Video Call Adapter

Every location type resolves to an adapter that knows how to produce,
keep and release the meeting link stored on a booking.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional


class VideoCallAdapter(ABC):
	"""
	Interfaz de los adaptadores de link de reunión.

	create_meeting corre antes de guardar el booking; update/delete se
	llaman al reagendar y cancelar.
	"""

	@abstractmethod
	def create_meeting(self, event_type: Any, booking_id: str) -> Dict[str, Any]:
		"""
		Returns:
			dict: {"meeting_url": str, "meeting_id": str | None}
		"""

	def update_meeting(self, booking: Any) -> bool:
		"""El link se conserva al reagendar."""
		return True

	def delete_meeting(self, booking: Any) -> bool:
		return True


class PlaceholderLinkAdapter(VideoCallAdapter):
	"""
	Link determinístico "<base_url>/mock-<id>" derivado del booking id.

	Las subclases fijan DEFAULT_BASE_URL e ID_PREFIX.
	"""

	DEFAULT_BASE_URL = ""
	ID_PREFIX = "mock-"

	def __init__(self, base_url: Optional[str] = None):
		self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

	def create_meeting(self, event_type: Any, booking_id: str) -> Dict[str, Any]:
		suffix = link_suffix(booking_id)
		return {
			"meeting_url": f"{self.base_url}/mock-{suffix}",
			"meeting_id": f"{self.ID_PREFIX}{suffix}",
		}


def link_suffix(booking_id: str) -> str:
	"""Parte variable del link: el id sin el prefijo "bk_"."""
	return booking_id[3:] if booking_id.startswith("bk_") else booking_id

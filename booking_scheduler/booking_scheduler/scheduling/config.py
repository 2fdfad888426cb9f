"""
Scheduling Settings

Tunables shared by the scheduling services. The API layer builds them from
the ``booking_scheduler`` key in site_config.json (``frappe.conf``); tests
and plain-Python callers use the defaults.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


DEFAULT_MEETING_LINK_BASE_URLS = {
	"google_meet": "https://meet.google.com",
	"zoom": "https://zoom.us/j",
}


@dataclass
class SchedulingSettings:
	"""Settings del módulo de agendamiento."""

	default_timezone: str = "UTC"
	max_guests: int = 5
	min_duration_minutes: int = 5
	default_cancel_reason: str = "Cancelled by owner"
	meeting_link_base_urls: Dict[str, str] = field(
		default_factory=lambda: dict(DEFAULT_MEETING_LINK_BASE_URLS)
	)

	@classmethod
	def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SchedulingSettings":
		"""
		Construye settings desde un dict, ignorando claves desconocidas.

		Las URLs de meeting se mezclan con los defaults en vez de reemplazarlos.
		"""
		if not data:
			return cls()

		known = {f.name for f in fields(cls)}
		values = {key: value for key, value in data.items() if key in known}

		if "meeting_link_base_urls" in values:
			merged = dict(DEFAULT_MEETING_LINK_BASE_URLS)
			merged.update(values["meeting_link_base_urls"] or {})
			values["meeting_link_base_urls"] = merged

		return cls(**values)

"""
Video Call Adapter Factory

Maps an event type's location to the adapter that produces its link.
"""

from typing import Dict, Optional

from .base import VideoCallAdapter
from .google_meet import GoogleMeetAdapter
from .no_link import NoLinkAdapter
from .zoom import ZoomAdapter


ADAPTERS = {
	"google_meet": GoogleMeetAdapter,
	"zoom": ZoomAdapter,
	"phone": NoLinkAdapter,
	"in_person": NoLinkAdapter,
}


def get_adapter(location_type, base_urls: Optional[Dict[str, str]] = None) -> VideoCallAdapter:
	"""
	Adapter para un location_type (str o LocationType).

	Args:
		location_type: "google_meet", "zoom", "phone" o "in_person"
		base_urls: overrides de URL base por proveedor (settings.meeting_link_base_urls)

	Raises:
		ValueError: si location_type no es soportado
	"""
	location_type = getattr(location_type, "value", location_type)
	adapter_class = ADAPTERS.get(location_type)
	if adapter_class is None:
		raise ValueError(f"Unsupported location type: {location_type}")

	if issubclass(adapter_class, NoLinkAdapter):
		return adapter_class()
	return adapter_class((base_urls or {}).get(location_type))

"""
Owner Booking List

Filtering, search and counters for the owner's bookings dashboard.
"Upcoming" means a confirmed booking that has not started yet.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .models import Booking, BookingStatus
from .overlap import EventTypeLookup, index_event_types
from .timezones import ensure_utc


UPCOMING = "upcoming"
LIST_FILTERS = [status.value for status in BookingStatus] + [UPCOMING]


def is_upcoming(booking: Booking, now: datetime) -> bool:
	return booking.status == BookingStatus.CONFIRMED and booking.start_time >= ensure_utc(now)


def filter_bookings(
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	now: datetime,
	status: Optional[str] = None,
	search: Optional[str] = None
) -> List[Booking]:
	"""
	Filtra bookings por status y texto libre, más recientes primero.

	Args:
		bookings: bookings del owner
		event_types: Event Types del owner (para buscar por título)
		now: instante actual, usado por el filtro "upcoming"
		status: valor de BookingStatus o "upcoming"; None = todos
		search: texto sobre nombre/email del attendee y título del Event Type

	Raises:
		ValueError: si status no es un filtro conocido
	"""
	if status and status not in LIST_FILTERS:
		raise ValueError(f"Unknown booking filter: {status}")

	by_id = index_event_types(event_types)
	needle = (search or "").strip().lower()
	results = []

	for booking in bookings:
		if status == UPCOMING:
			if not is_upcoming(booking, now):
				continue
		elif status and booking.status.value != status:
			continue

		if needle:
			event_type = by_id.get(booking.event_type_id)
			haystack = " ".join([
				booking.attendee_name,
				booking.attendee_email,
				event_type.title if event_type else "",
			]).lower()
			if needle not in haystack:
				continue

		results.append(booking)

	results.sort(key=lambda booking: booking.start_time, reverse=True)
	return results


def summarize_bookings(bookings: Iterable[Booking], now: datetime) -> Dict[str, int]:
	"""Contadores del dashboard: total, uno por status y upcoming."""
	summary = {"total": 0, UPCOMING: 0}
	summary.update({status.value: 0 for status in BookingStatus})

	for booking in bookings:
		summary["total"] += 1
		summary[booking.status.value] += 1
		if is_upcoming(booking, now):
			summary[UPCOMING] += 1

	return summary

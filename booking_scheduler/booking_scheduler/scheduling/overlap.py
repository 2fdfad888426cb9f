"""
Overlap Detection Service

Detects conflicts between a candidate [start, end) window and existing
bookings, considering:
- Booking status (confirmed and rescheduled bookings block)
- Buffers of each existing booking's own event type
- Owner scoping
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .models import Booking, EventType
from .timezones import ensure_utc


EventTypeLookup = Union[Mapping[str, EventType], Iterable[EventType]]


def index_event_types(event_types: EventTypeLookup) -> Mapping[str, EventType]:
	"""Devuelve un dict {id: EventType} a partir de un dict o de una lista."""
	if isinstance(event_types, Mapping):
		return event_types
	return {event_type.id: event_type for event_type in event_types}


def expanded_interval(booking: Booking, event_types: Mapping[str, EventType]) -> Dict[str, datetime]:
	"""
	Intervalo del booking expandido con los buffers de su propio Event Type.

	Si el Event Type ya no existe, los buffers valen 0.
	"""
	event_type = event_types.get(booking.event_type_id)
	buffer_before = event_type.buffer_before_mins if event_type else 0
	buffer_after = event_type.buffer_after_mins if event_type else 0

	return {
		"start": ensure_utc(booking.start_time) - timedelta(minutes=buffer_before),
		"end": ensure_utc(booking.end_time) + timedelta(minutes=buffer_after),
	}


def check_overlap(
	start: datetime,
	end: datetime,
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	exclude_booking: Optional[str] = None,
	owner: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Detecta bookings que chocan con [start, end).

	Args:
		start: inicio del candidato
		end: fin del candidato
		bookings: bookings existentes
		event_types: Event Types (dict por id o lista) para resolver buffers
		exclude_booking: id de un booking a ignorar (reagendamiento)
		owner: si se indica, solo cuentan los bookings de ese owner

	Returns:
		dict: {
			"has_overlap": bool,
			"overlapping_bookings": [ids de bookings]
		}

	Algoritmo:
		1. Ignorar bookings que no bloquean (cancelled) o excluidos
		2. Expandir cada booking con sus buffers
		3. Overlap: start < expanded_end AND end > expanded_start
	"""
	start = ensure_utc(start)
	end = ensure_utc(end)
	lookup = index_event_types(event_types)

	overlapping: List[str] = []

	for booking in bookings:
		if not booking.is_blocking:
			continue
		if exclude_booking and booking.id == exclude_booking:
			continue
		if owner is not None and booking.owner != owner:
			continue

		interval = expanded_interval(booking, lookup)
		if start < interval["end"] and end > interval["start"]:
			overlapping.append(booking.id)

	return {
		"has_overlap": bool(overlapping),
		"overlapping_bookings": overlapping,
	}


def is_slot_taken(
	start: datetime,
	end: datetime,
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	exclude_booking: Optional[str] = None,
	owner: Optional[str] = None
) -> bool:
	"""True si [start, end) choca con algún booking que bloquea."""
	return check_overlap(
		start, end, bookings, event_types,
		exclude_booking=exclude_booking,
		owner=owner
	)["has_overlap"]

"""
Slot Generation Service

Generates discrete bookable slots for one civil date, considering:
- The effective availability rule
- Event type duration, minimum notice and booking window
- Existing bookings (buffer-expanded)
- The owner's timezone (DST-aware)
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

from .availability import resolve_effective_rule
from .models import AvailabilityRule, Booking, EventType, Slot
from .overlap import EventTypeLookup, index_event_types, is_slot_taken
from .timezones import ensure_utc, local_date, local_to_utc, parse_date, parse_hhmm


def generate_slots(
	target_date: Union[date, str],
	rule: Optional[AvailabilityRule],
	event_type: EventType,
	owner_timezone: str,
	now: datetime,
	bookings: Iterable[Booking] = (),
	event_types: EventTypeLookup = ()
) -> List[Slot]:
	"""
	Genera los slots de un día a partir de la regla efectiva.

	Args:
		target_date: fecha civil del owner
		rule: regla efectiva (resolve_effective_rule), puede ser None
		event_type: Event Type que se quiere agendar
		owner_timezone: timezone IANA en el que se leen las horas del rule
		now: instante actual (inyectado)
		bookings: bookings existentes para el filtro de conflictos
		event_types: Event Types para resolver buffers de esos bookings

	Returns:
		list[Slot]: ordenados ascendentemente, posiblemente vacía

	Algoritmo:
		1. Sin regla o regla no disponible -> []
		2. Cursor desde start hasta end en pasos de duration_minutes,
		   solo mientras cursor + duration <= end (sin slot parcial)
		3. Convertir cada cursor a instante UTC en owner_timezone
		4. Descartar si start - now < min_notice
		5. Descartar si choca con un booking

	Raises:
		InvalidRuleError: si las horas del rule no parsean
		InvalidTimezoneError: si owner_timezone no existe
	"""
	if rule is None or not rule.is_available:
		return []

	target_date = parse_date(target_date)
	now = ensure_utc(now)
	bookings = list(bookings)
	lookup = index_event_types(event_types)

	start_minutes = parse_hhmm(rule.start_time)
	end_minutes = parse_hhmm(rule.end_time)
	duration = event_type.duration_minutes
	min_notice = timedelta(minutes=event_type.min_notice_mins)

	slots = []
	cursor = start_minutes

	while cursor + duration <= end_minutes:
		slot_start = local_to_utc(target_date, cursor, owner_timezone)
		cursor += duration

		# Hora local inexistente (cambio de horario)
		if slot_start is None:
			continue

		slot_end = slot_start + timedelta(minutes=duration)

		if slot_start - now < min_notice:
			continue

		if is_slot_taken(slot_start, slot_end, bookings, lookup):
			continue

		slots.append(Slot(slot_start, slot_end))

	# Ya vienen ordenados salvo en días con horas ambiguas
	slots.sort(key=lambda slot: slot.start)
	return slots


def count_bookings_on_date(
	target_date: date,
	event_type: EventType,
	bookings: Iterable[Booking],
	owner_timezone: str
) -> int:
	"""Cantidad de bookings que bloquean de ese Event Type que empiezan ese día (hora del owner)."""
	return sum(
		1
		for booking in bookings
		if booking.is_blocking
		and booking.event_type_id == event_type.id
		and local_date(booking.start_time, owner_timezone) == target_date
	)


def is_within_booking_window(target_date: date, event_type: EventType) -> bool:
	"""True si la fecha cae dentro de date_range_start..date_range_end (si existen)."""
	if event_type.date_range_start and target_date < event_type.date_range_start:
		return False
	if event_type.date_range_end and target_date > event_type.date_range_end:
		return False
	return True


def get_available_slots(
	target_date: Union[date, str],
	event_type: EventType,
	rules: Iterable[AvailabilityRule],
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	owner_timezone: str,
	now: datetime
) -> List[Slot]:
	"""
	Slots visibles para el attendee en una fecha.

	Compone resolver + generador + filtro de conflictos, acotado al owner del
	Event Type, y aplica las restricciones del Event Type:
	- Event Type inactivo -> []
	- Fecha fuera de la ventana de reserva -> []
	- max_bookings_per_day alcanzado -> []
	"""
	target_date = parse_date(target_date)

	if not event_type.is_active:
		return []

	if not is_within_booking_window(target_date, event_type):
		return []

	owner = event_type.owner
	owner_bookings = [booking for booking in bookings if booking.owner == owner]

	if event_type.max_bookings_per_day:
		booked = count_bookings_on_date(target_date, event_type, owner_bookings, owner_timezone)
		if booked >= event_type.max_bookings_per_day:
			return []

	rule = resolve_effective_rule(target_date, rules, owner=owner)

	return generate_slots(
		target_date,
		rule,
		event_type,
		owner_timezone,
		now,
		bookings=owner_bookings,
		event_types=event_types
	)


def get_available_slots_for_range(
	start_date: Union[date, str],
	end_date: Union[date, str],
	event_type: EventType,
	rules: Iterable[AvailabilityRule],
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	owner_timezone: str,
	now: datetime
) -> Dict[str, List[Slot]]:
	"""
	Slots disponibles para un rango de fechas.

	Returns:
		dict: {
			"2026-03-02": [Slot, ...],
			...
		}
		Solo incluye días con al menos un slot.
	"""
	start_date = parse_date(start_date)
	end_date = parse_date(end_date)
	rules = list(rules)
	bookings = list(bookings)
	lookup = index_event_types(event_types)

	result = {}
	current_date = start_date

	while current_date <= end_date:
		slots = get_available_slots(
			current_date, event_type, rules, bookings, lookup, owner_timezone, now
		)
		if slots:
			result[current_date.strftime("%Y-%m-%d")] = slots
		current_date += timedelta(days=1)

	return result


def get_bookable_dates(
	year: int,
	month: int,
	event_type: EventType,
	rules: Iterable[AvailabilityRule],
	bookings: Iterable[Booking],
	event_types: EventTypeLookup,
	owner_timezone: str,
	now: datetime
) -> List[date]:
	"""
	Fechas del mes con al menos un slot (vista de calendario mensual).

	Los días anteriores a hoy (en el timezone del owner) nunca se incluyen.
	"""
	days_in_month = calendar.monthrange(year, month)[1]
	first = date(year, month, 1)
	last = date(year, month, days_in_month)

	today = local_date(now, owner_timezone)
	if last < today:
		return []

	by_date = get_available_slots_for_range(
		max(first, today), last, event_type, rules, bookings, event_types, owner_timezone, now
	)
	return [parse_date(key) for key in sorted(by_date)]

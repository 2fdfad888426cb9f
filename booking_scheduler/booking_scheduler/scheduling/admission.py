"""
Booking Admission

Validates and records bookings, and applies the owner's status changes:
- submit_booking: confirmed booking, re-checked against the store under a lock
- cancel_booking: confirmed/rescheduled -> cancelled (terminal)
- reschedule_booking: moves start/end in place, keeps id and meeting link
"""

import re
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ..video_calls.factory import get_adapter
from .config import SchedulingSettings
from .errors import (
	BookingNotFound,
	BookingValidationError,
	EventTypeNotFound,
	InvalidStatusTransition,
	SlotNoLongerAvailable,
)
from .models import (
	Booking,
	BookingRequest,
	BookingStatus,
	CustomAnswer,
	EventType,
	QuestionType,
	Slot,
)
from .overlap import is_slot_taken
from .slots import count_bookings_on_date, get_available_slots, is_within_booking_window
from .store import BookingStore
from .timezones import ensure_utc, is_valid_timezone, local_date


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Optional[str]) -> bool:
	return bool(value) and bool(EMAIL_PATTERN.match(value))


def new_booking_id() -> str:
	return f"bk_{uuid.uuid4().hex[:12]}"


def _is_number(value: str) -> bool:
	try:
		float(value)
	except ValueError:
		return False
	return True


def answer_text(answers: Dict[str, Any], question_id: str) -> str:
	"""Respuesta como texto; 0 es una respuesta válida, solo None/ausente es vacío."""
	value = answers.get(question_id)
	return "" if value is None else str(value).strip()


def validate_booking_request(
	request: BookingRequest,
	event_type: EventType,
	owner_timezone: str,
	now: datetime,
	settings: Optional[SchedulingSettings] = None
) -> Dict[str, str]:
	"""
	Valida todos los campos y devuelve todos los errores juntos.

	Returns:
		dict: {campo: mensaje}; vacío si el request es válido
	"""
	settings = settings or SchedulingSettings()
	errors: Dict[str, str] = {}

	if not event_type.is_active:
		errors["event_type"] = "This event type is not accepting bookings."

	# Attendee
	if not (request.attendee_name or "").strip():
		errors["attendee_name"] = "Name is required."

	email = (request.attendee_email or "").strip()
	if not email:
		errors["attendee_email"] = "Email is required."
	elif not is_valid_email(email):
		errors["attendee_email"] = "Please enter a valid email address."

	if not is_valid_timezone(request.attendee_timezone):
		errors["attendee_timezone"] = "Unknown timezone."

	# Guests: las vacías se ignoran
	guests = request.guests or []
	if len(guests) > settings.max_guests:
		errors["guests"] = f"You can add up to {settings.max_guests} guests."
	for idx, guest in enumerate(guests):
		guest = (guest or "").strip()
		if guest and not is_valid_email(guest):
			errors[f"guest_{idx}"] = "Please enter a valid email address."

	# Custom questions
	answers = request.answers or {}
	for question in event_type.custom_questions:
		answer = answer_text(answers, question.id)
		if question.required and not answer:
			errors[question.id] = f"{question.label} is required."
		elif answer and question.type == QuestionType.NUMBER and not _is_number(answer):
			errors[question.id] = f"{question.label} must be a number."

	# Horario
	start = ensure_utc(request.start_time)
	end = ensure_utc(request.end_time)
	if start >= end:
		errors["start_time"] = "Start time must be before end time."
	elif end - start != timedelta(minutes=event_type.duration_minutes):
		errors["start_time"] = "Booking length must match the event duration."
	elif start - ensure_utc(now) < timedelta(minutes=event_type.min_notice_mins):
		errors["start_time"] = "This time is too soon to book."
	elif not is_within_booking_window(local_date(start, owner_timezone), event_type):
		errors["start_time"] = "This date is outside the booking window."

	return errors


def snapshot_answers(event_type: EventType, answers: Dict[str, Any]) -> List[CustomAnswer]:
	"""Copia las preguntas del Event Type con sus respuestas, tal como están hoy."""
	return [
		CustomAnswer(
			question_id=question.id,
			label=question.label,
			answer=answer_text(answers, question.id),
		)
		for question in event_type.custom_questions
	]


def submit_booking(
	store: BookingStore,
	request: BookingRequest,
	owner_timezone: str,
	now: datetime,
	settings: Optional[SchedulingSettings] = None,
	id_factory: Callable[[], str] = new_booking_id
) -> Booking:
	"""
	Valida y registra un booking nuevo.

	Args:
		store: store del que se releen bookings y en el que se agrega el nuevo
		request: datos del attendee
		owner_timezone: timezone del owner del Event Type
		now: instante actual (inyectado)
		settings: SchedulingSettings (defaults si None)
		id_factory: genera el id del booking

	Returns:
		Booking confirmado

	Raises:
		EventTypeNotFound: si el Event Type no existe
		BookingValidationError: con todos los errores de campos
		SlotNoLongerAvailable: si el horario se ocupó desde que se listó o ya
			no es un slot de la disponibilidad del owner

	Algoritmo:
		1. Validar todos los campos (sin fail-fast)
		2. Bajo el lock del owner: releer bookings y re-chequear conflicto,
		   tope diario y que el horario sea un slot listable (regla del día)
		3. Crear booking confirmed con link de meeting y respuestas
		4. Agregarlo al store
	"""
	settings = settings or SchedulingSettings()
	now = ensure_utc(now)

	event_type = store.get_event_type(request.event_type_id)
	if event_type is None:
		raise EventTypeNotFound(request.event_type_id)

	errors = validate_booking_request(request, event_type, owner_timezone, now, settings)
	if errors:
		raise BookingValidationError(errors)

	start = ensure_utc(request.start_time)
	end = ensure_utc(request.end_time)
	owner = event_type.owner

	with store.lock(owner):
		bookings = store.list_bookings(owner=owner)
		event_types = store.list_event_types(owner=owner)

		if is_slot_taken(start, end, bookings, event_types):
			raise SlotNoLongerAvailable()

		if event_type.max_bookings_per_day:
			booked = count_bookings_on_date(
				local_date(start, owner_timezone), event_type, bookings, owner_timezone
			)
			if booked >= event_type.max_bookings_per_day:
				raise SlotNoLongerAvailable("No more bookings are available on this date.")

		# Debe ser uno de los slots que se listarían ahora mismo
		open_slots = get_available_slots(
			local_date(start, owner_timezone),
			event_type,
			store.list_rules(owner=owner),
			bookings,
			event_types,
			owner_timezone,
			now
		)
		if Slot(start, end) not in open_slots:
			raise SlotNoLongerAvailable()

		booking_id = id_factory()
		meeting = get_adapter(
			event_type.location_type, settings.meeting_link_base_urls
		).create_meeting(event_type, booking_id)

		booking = Booking(
			id=booking_id,
			owner=owner,
			event_type_id=event_type.id,
			attendee_name=request.attendee_name.strip(),
			attendee_email=request.attendee_email.strip(),
			attendee_timezone=request.attendee_timezone,
			start_time=start,
			end_time=end,
			status=BookingStatus.CONFIRMED,
			custom_answers=snapshot_answers(event_type, request.answers or {}),
			meeting_link=meeting.get("meeting_url") or "",
			created_at=now,
			cancel_reason=None,
			notes=(request.notes or "").strip(),
			guests=[guest.strip() for guest in request.guests or [] if guest and guest.strip()],
		)

		return store.add_booking(booking)


def _get_booking(store: BookingStore, booking_id: str) -> Booking:
	booking = store.get_booking(booking_id)
	if booking is None:
		raise BookingNotFound(booking_id)
	return booking


def _get_adapter_for(store: BookingStore, booking: Booking, settings: SchedulingSettings):
	event_type = store.get_event_type(booking.event_type_id)
	if event_type is None:
		return None
	return get_adapter(event_type.location_type, settings.meeting_link_base_urls)


def cancel_booking(
	store: BookingStore,
	booking_id: str,
	reason: Optional[str] = None,
	settings: Optional[SchedulingSettings] = None
) -> Booking:
	"""
	Cancela un booking (terminal).

	Raises:
		BookingNotFound
		InvalidStatusTransition: si ya estaba cancelado
	"""
	settings = settings or SchedulingSettings()
	booking = _get_booking(store, booking_id)

	if booking.status == BookingStatus.CANCELLED:
		raise InvalidStatusTransition(f"Booking {booking_id} is already cancelled")

	adapter = _get_adapter_for(store, booking, settings)
	if adapter is not None:
		adapter.delete_meeting(booking)

	cancelled = booking.with_changes(
		status=BookingStatus.CANCELLED,
		cancel_reason=(reason or "").strip() or settings.default_cancel_reason,
	)
	return store.update_booking(cancelled)


def reschedule_booking(
	store: BookingStore,
	booking_id: str,
	start: datetime,
	end: datetime,
	settings: Optional[SchedulingSettings] = None
) -> Booking:
	"""
	Mueve un booking a [start, end), conservando id y meeting link.

	Raises:
		BookingNotFound
		InvalidStatusTransition: si el booking está cancelado
		ValueError: si start >= end
		SlotNoLongerAvailable: si el nuevo horario choca con otro booking
	"""
	settings = settings or SchedulingSettings()
	start = ensure_utc(start)
	end = ensure_utc(end)

	if start >= end:
		raise ValueError("Start time must be before end time")

	booking = _get_booking(store, booking_id)
	if booking.status == BookingStatus.CANCELLED:
		raise InvalidStatusTransition(f"Booking {booking_id} is cancelled and cannot be rescheduled")

	with store.lock(booking.owner):
		bookings = store.list_bookings(owner=booking.owner)
		event_types = store.list_event_types(owner=booking.owner)

		if is_slot_taken(start, end, bookings, event_types, exclude_booking=booking.id):
			raise SlotNoLongerAvailable()

		moved = booking.with_changes(
			start_time=start,
			end_time=end,
			status=BookingStatus.RESCHEDULED,
		)

		adapter = _get_adapter_for(store, moved, settings)
		if adapter is not None:
			adapter.update_meeting(moved)

		return store.update_booking(moved)

"""
Booking API Endpoints

Whitelisted functions for the public booking page and the owner's dashboard.
Attendee endpoints allow guest access with security protections:
- Rate limiting by IP address
- Honeypot validation for bot detection
- Input sanitization
Owner endpoints require the calendar owner (or a System Manager).

All instants cross the API as ISO-8601 UTC strings ("2026-03-02T04:00:00Z").
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import frappe
import pytz
from frappe import _

# Import scheduling services
from booking_scheduler.booking_scheduler.scheduling.admission import (
	cancel_booking as cancel_booking_service,
	reschedule_booking as reschedule_booking_service,
	submit_booking as submit_booking_service,
)
from booking_scheduler.booking_scheduler.scheduling.booking_list import LIST_FILTERS, filter_bookings, summarize_bookings
from booking_scheduler.booking_scheduler.scheduling.errors import (
	BookingNotFound,
	BookingValidationError,
	EventTypeNotFound,
	InvalidStatusTransition,
	SchedulingError,
	SlotNoLongerAvailable,
)
from booking_scheduler.booking_scheduler.scheduling.frappe_store import (
	FrappeBookingStore,
	get_owner_timezone,
	get_scheduling_settings,
)
from booking_scheduler.booking_scheduler.scheduling.models import Booking, BookingRequest, EventType
from booking_scheduler.booking_scheduler.scheduling.slots import get_available_slots as get_slots_for_date
from booking_scheduler.booking_scheduler.scheduling.slots import get_bookable_dates as get_bookable_dates_for_month
from booking_scheduler.booking_scheduler.scheduling.timezones import (
	format_date_heading,
	format_datetime_display,
	format_slot_time,
	is_valid_timezone,
	to_iso,
)
from booking_scheduler.booking_scheduler.calendar_links import booking_invite_description, build_calendar_url

# Import security utilities
from booking_scheduler.api.shared import (
	check_honeypot,
	check_rate_limit,
	clean_text,
	parse_date_arg,
	parse_instant_arg,
	require_booking_owner,
	validate_docname,
	validate_year_month,
)


def _logger():
	return frappe.logger("booking_scheduler")


def _now() -> datetime:
	return datetime.now(pytz.utc)


def _get_event_type(store: FrappeBookingStore, event_type_id: str, for_attendee: bool = True) -> EventType:
	"""Event Type o DoesNotExistError; los inactivos no se muestran a attendees."""
	event_type = store.get_event_type(event_type_id)
	if event_type is None or (for_attendee and not event_type.is_active):
		frappe.throw(_("Event type not found"), frappe.DoesNotExistError)
	return event_type


def _get_booking(store: FrappeBookingStore, booking_id: str) -> Booking:
	booking = store.get_booking(booking_id)
	if booking is None:
		frappe.throw(_("Booking not found"), frappe.DoesNotExistError)
	return booking


def _display_timezone(attendee_timezone: Optional[str], owner_timezone: str) -> str:
	if attendee_timezone and is_valid_timezone(attendee_timezone):
		return attendee_timezone
	return owner_timezone


def _booking_response(booking: Booking, event_type: Optional[EventType]) -> Dict[str, Any]:
	"""Booking serializado con textos de fecha y título del Event Type."""
	data = booking.as_dict()
	data["event_type_title"] = event_type.title if event_type else ""
	data["start_display"] = format_datetime_display(booking.start_time, booking.attendee_timezone)
	return data


def _calendar_url(booking: Booking, event_type: Optional[EventType], provider: str = "google") -> str:
	title = event_type.title if event_type else _("Meeting")
	return build_calendar_url(
		provider,
		title,
		booking.start_time,
		booking.end_time,
		booking_invite_description(event_type.description if event_type else "", booking.meeting_link),
		booking.meeting_link
	)


# ===== EVENT TYPES =====

@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_event_types(owner: str) -> List[Dict[str, Any]]:
	"""
	Obtiene los Event Types activos de un owner (página pública de reservas).

	Rate limited: 30 requests per minute per IP.

	Args:
		owner: User del owner del calendario

	Returns:
		list[dict]: Event Types activos ordenados por título
	"""
	check_rate_limit("read")
	owner = validate_docname(owner, "owner")

	try:
		store = FrappeBookingStore()
		event_types = [et for et in store.list_event_types(owner) if et.is_active]
		event_types.sort(key=lambda et: et.title.lower())
		return [et.as_dict() for et in event_types]

	except Exception as e:
		frappe.log_error(f"Error getting event types: {str(e)}", "Booking API Error")
		frappe.throw(_("Could not load event types"))


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_event_type(owner: str, slug: str) -> Dict[str, Any]:
	"""
	Obtiene un Event Type activo por owner + slug.

	Returns:
		dict: Event Type con "owner_timezone" agregado
	"""
	check_rate_limit("read")
	owner = validate_docname(owner, "owner")
	slug = validate_docname(slug, "slug")

	store = FrappeBookingStore()
	event_type = store.get_event_type_by_slug(owner, slug)
	if event_type is None or not event_type.is_active:
		frappe.throw(_("Event type not found"), frappe.DoesNotExistError)

	data = event_type.as_dict()
	data["owner_timezone"] = get_owner_timezone(owner)
	return data


# ===== AVAILABILITY =====

@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_bookable_dates(event_type: str, year: int, month: int) -> List[str]:
	"""
	Fechas del mes con al menos un slot disponible.

	Rate limited: 30 requests per minute per IP.

	Args:
		event_type: nombre del Booking Event Type
		year: año (ej. 2026)
		month: mes 1..12

	Returns:
		list[str]: ["2026-03-02", "2026-03-09", ...]
	"""
	check_rate_limit("read")
	event_type = validate_docname(event_type, "event_type")
	year, month = validate_year_month(year, month)

	store = FrappeBookingStore()
	et = _get_event_type(store, event_type)
	owner_timezone = get_owner_timezone(et.owner)

	try:
		dates = get_bookable_dates_for_month(
			year,
			month,
			et,
			store.list_rules(et.owner),
			store.list_bookings(et.owner),
			store.list_event_types(et.owner),
			owner_timezone,
			_now()
		)
		return [d.isoformat() for d in dates]

	except SchedulingError as e:
		frappe.log_error(f"Error in get_bookable_dates: {str(e)}", "Booking API Error")
		frappe.throw(_("Availability is misconfigured for this calendar"))


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_available_slots(event_type: str, date: str, attendee_timezone: Optional[str] = None) -> Dict[str, Any]:
	"""
	Slots disponibles de un Event Type en una fecha civil del owner.

	Rate limited: 30 requests per minute per IP.

	Args:
		event_type: nombre del Booking Event Type
		date: fecha (YYYY-MM-DD) en el calendario del owner
		attendee_timezone: timezone para las etiquetas (default: el del owner)

	Returns:
		dict: {
			"date": "2026-03-02",
			"heading": "Monday, March 2, 2026",
			"timezone": "Asia/Kolkata",
			"slots": [
				{"start": "2026-03-02T04:00:00Z", "end": "2026-03-02T04:30:00Z", "label": "09:30 AM"},
				...
			]
		}
	"""
	check_rate_limit("read")
	event_type = validate_docname(event_type, "event_type")
	date = parse_date_arg(date, "date")

	store = FrappeBookingStore()
	et = _get_event_type(store, event_type)
	owner_timezone = get_owner_timezone(et.owner)
	display_tz = _display_timezone(attendee_timezone, owner_timezone)

	try:
		slots = get_slots_for_date(
			date,
			et,
			store.list_rules(et.owner),
			store.list_bookings(et.owner),
			store.list_event_types(et.owner),
			owner_timezone,
			_now()
		)
	except ValueError as e:
		# InvalidRuleError / InvalidTimezoneError también son ValueError
		frappe.log_error(f"Error in get_available_slots: {str(e)}", "Booking API Error")
		frappe.throw(_("Could not load available times"))

	return {
		"date": date.isoformat(),
		"heading": format_date_heading(date),
		"timezone": display_tz,
		"slots": [
			{**slot.as_dict(), "label": format_slot_time(slot.start, display_tz)}
			for slot in slots
		],
	}


# ===== BOOKINGS (ATTENDEE) =====

@frappe.whitelist(allow_guest=True, methods=['POST'])
def submit_booking(
	event_type: str,
	attendee_name: str,
	attendee_email: str,
	attendee_timezone: str,
	start_time: str,
	end_time: str,
	notes: Optional[str] = None,
	guests: Optional[Any] = None,
	answers: Optional[Any] = None,
	honeypot: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Reserva un slot.

	Rate limited: 5 requests per minute per IP (write operation).
	Protected by honeypot field.

	Args:
		event_type: nombre del Booking Event Type
		attendee_name, attendee_email, attendee_timezone: datos del attendee
		start_time, end_time: instantes ISO-8601 UTC del slot elegido
		notes: notas opcionales
		guests: lista JSON de emails
		answers: dict JSON {question_id: respuesta}
		honeypot: campo honeypot (debe estar vacío)

	Returns:
		dict: {
			"success": True,
			"booking": {...},
			"calendar_url": "https://calendar.google.com/..."
		}
		o, si el attendee debe corregir algo:
		{
			"success": False,
			"error": "validation" | "slot_taken",
			"message": str,
			"errors": {campo: mensaje}
		}
	"""
	check_honeypot(honeypot)
	check_rate_limit("submit_booking")

	event_type = validate_docname(event_type, "event_type")
	start_time = parse_instant_arg(start_time, "start_time")
	end_time = parse_instant_arg(end_time, "end_time")

	guests = frappe.parse_json(guests) if guests else []
	answers = frappe.parse_json(answers) if answers else {}
	if not isinstance(guests, list) or not isinstance(answers, dict):
		frappe.throw(_("Invalid guests or answers"), frappe.ValidationError)

	request = BookingRequest(
		event_type_id=event_type,
		attendee_name=clean_text(attendee_name, 140),
		attendee_email=clean_text(attendee_email, 140),
		attendee_timezone=clean_text(attendee_timezone, 64),
		start_time=start_time,
		end_time=end_time,
		notes=clean_text(notes, 2000),
		guests=[clean_text(g, 140) for g in guests],
		answers={str(k): clean_text(v, 2000) for k, v in answers.items()},
	)

	store = FrappeBookingStore()
	settings = get_scheduling_settings()
	et = _get_event_type(store, event_type)

	try:
		booking = submit_booking_service(
			store,
			request,
			get_owner_timezone(et.owner, settings),
			_now(),
			settings
		)
		frappe.db.commit()

	except BookingValidationError as e:
		return {
			"success": False,
			"error": "validation",
			"message": _("Please correct the highlighted fields."),
			"errors": e.errors,
		}

	except SlotNoLongerAvailable as e:
		frappe.db.rollback()
		_logger().info(f"Booking race lost for {event_type} at {to_iso(start_time)}")
		return {
			"success": False,
			"error": "slot_taken",
			"message": str(e),
			"errors": {"start_time": str(e)},
		}

	except EventTypeNotFound:
		frappe.throw(_("Event type not found"), frappe.DoesNotExistError)

	except (frappe.ValidationError, frappe.PermissionError):
		raise

	except Exception as e:
		frappe.db.rollback()
		frappe.log_error(f"Error in submit_booking: {str(e)}", "Booking API Error")
		frappe.throw(_("Could not create the booking. Please try again."))

	_logger().info(f"Booking {booking.id} admitted for {et.id} at {to_iso(booking.start_time)}")

	return {
		"success": True,
		"booking": _booking_response(booking, et),
		"calendar_url": _calendar_url(booking, et),
	}


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_calendar_link(booking: str, provider: str = "google") -> Dict[str, str]:
	"""
	URL "Add to calendar" de un booking.

	Args:
		booking: id del booking
		provider: "google" u "outlook"

	Returns:
		dict: {"url": str}
	"""
	check_rate_limit("calendar_link")
	booking = validate_docname(booking, "booking")

	store = FrappeBookingStore()
	record = _get_booking(store, booking)

	try:
		return {"url": _calendar_url(record, store.get_event_type(record.event_type_id), provider)}
	except ValueError as e:
		frappe.throw(_(str(e)))


# ===== BOOKINGS (OWNER) =====

@frappe.whitelist(methods=['GET'])
def get_bookings(status: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
	"""
	Bookings del usuario logueado, más recientes primero.

	Args:
		status: "confirmed", "cancelled", "rescheduled" o "upcoming"
			(confirmed y sin empezar); opcional
		search: texto libre sobre nombre/email del attendee y título del Event Type

	Returns:
		list[dict]: bookings serializados con "event_type_title"
	"""
	owner = frappe.session.user
	require_booking_owner(owner)

	if status and status not in LIST_FILTERS:
		frappe.throw(_("Invalid status"), frappe.ValidationError)

	store = FrappeBookingStore()
	event_types = {et.id: et for et in store.list_event_types(owner)}

	bookings = filter_bookings(
		store.list_bookings(owner),
		event_types,
		_now(),
		status=status or None,
		search=clean_text(search, 140)
	)
	return [_booking_response(booking, event_types.get(booking.event_type_id)) for booking in bookings]


@frappe.whitelist(methods=['GET'])
def get_booking_summary() -> Dict[str, int]:
	"""
	Contadores del dashboard de bookings del usuario logueado.

	Returns:
		dict: {"total", "confirmed", "cancelled", "rescheduled", "upcoming"}
	"""
	owner = frappe.session.user
	require_booking_owner(owner)

	return summarize_bookings(FrappeBookingStore().list_bookings(owner), _now())


@frappe.whitelist(methods=['POST'])
def cancel_booking(booking: str, reason: Optional[str] = None) -> Dict[str, Any]:
	"""
	Cancela un booking (terminal).

	Args:
		booking: id del booking
		reason: motivo (default de settings si vacío)

	Returns:
		dict: booking cancelado
	"""
	booking = validate_docname(booking, "booking")
	reason = clean_text(reason, 1000) or None

	store = FrappeBookingStore()
	require_booking_owner(_get_booking(store, booking).owner)

	try:
		cancelled = cancel_booking_service(store, booking, reason, get_scheduling_settings())
		frappe.db.commit()

	except InvalidStatusTransition:
		frappe.throw(_("This booking is already cancelled"))

	except BookingNotFound:
		frappe.throw(_("Booking not found"), frappe.DoesNotExistError)

	except (frappe.ValidationError, frappe.PermissionError):
		raise

	except Exception as e:
		frappe.db.rollback()
		frappe.log_error(f"Error in cancel_booking: {str(e)}", "Booking API Error")
		frappe.throw(_("Could not cancel the booking"))

	_logger().info(f"Booking {booking} cancelled by {frappe.session.user}")
	return _booking_response(cancelled, store.get_event_type(cancelled.event_type_id))


@frappe.whitelist(methods=['POST'])
def reschedule_booking(booking: str, start_time: str, end_time: str) -> Dict[str, Any]:
	"""
	Mueve un booking a otro horario, conservando id y meeting link.

	Args:
		booking: id del booking
		start_time, end_time: instantes ISO-8601 UTC

	Returns:
		dict: {"success": True, "booking": {...}} o
		      {"success": False, "error": "slot_taken", "message": str}
	"""
	booking = validate_docname(booking, "booking")
	start = parse_instant_arg(start_time, "start_time")
	end = parse_instant_arg(end_time, "end_time")

	store = FrappeBookingStore()
	require_booking_owner(_get_booking(store, booking).owner)

	try:
		moved = reschedule_booking_service(store, booking, start, end, get_scheduling_settings())
		frappe.db.commit()

	except SlotNoLongerAvailable as e:
		frappe.db.rollback()
		_logger().info(f"Reschedule of {booking} rejected: slot taken")
		return {"success": False, "error": "slot_taken", "message": str(e)}

	except InvalidStatusTransition:
		frappe.throw(_("A cancelled booking cannot be rescheduled"))

	except BookingNotFound:
		frappe.throw(_("Booking not found"), frappe.DoesNotExistError)

	except ValueError as e:
		frappe.throw(_(str(e)))

	except (frappe.ValidationError, frappe.PermissionError):
		raise

	except Exception as e:
		frappe.db.rollback()
		frappe.log_error(f"Error in reschedule_booking: {str(e)}", "Booking API Error")
		frappe.throw(_("Could not reschedule the booking"))

	_logger().info(f"Booking {booking} rescheduled to {to_iso(moved.start_time)}")
	return {
		"success": True,
		"booking": _booking_response(moved, store.get_event_type(moved.event_type_id)),
	}

"""
Frappe Booking Store

BookingStore backed by the app's DocTypes:
- Booking Event Type (+ Booking Custom Question)
- Availability Rule
- Booking (+ Booking Custom Answer)

Datetimes are stored as naive UTC in Datetime fields. The per-owner lock is
a row lock on the owner's User record, released when the request's
transaction commits or rolls back.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import frappe

from .config import SchedulingSettings
from .models import (
	AvailabilityRule,
	Booking,
	EventType,
	rule_from_dict,
)
from .store import BookingStore
from .timezones import ensure_utc, is_valid_timezone


EVENT_TYPE_FIELDS = [
	"name",
	"booking_owner",
	"slug",
	"title",
	"description",
	"duration_minutes",
	"location_type",
	"buffer_before_mins",
	"buffer_after_mins",
	"min_notice_mins",
	"is_active",
	"date_range_start",
	"date_range_end",
	"max_bookings_per_day",
	"color",
]

RULE_FIELDS = [
	"name",
	"booking_owner",
	"rule_type",
	"day_of_week",
	"date_override",
	"start_time",
	"end_time",
	"is_available",
]

BOOKING_FIELDS = [
	"name",
	"booking_owner",
	"event_type",
	"attendee_name",
	"attendee_email",
	"attendee_timezone",
	"start_time",
	"end_time",
	"status",
	"meeting_link",
	"booked_at",
	"cancel_reason",
	"notes",
	"guests",
]


def get_scheduling_settings() -> SchedulingSettings:
	"""Settings desde la clave "booking_scheduler" de site_config.json."""
	return SchedulingSettings.from_dict(frappe.conf.get("booking_scheduler"))


def get_owner_timezone(owner: str, settings: Optional[SchedulingSettings] = None) -> str:
	"""Timezone del User owner; si no tiene o es inválido, el default de settings."""
	settings = settings or get_scheduling_settings()
	tz_name = frappe.db.get_value("User", owner, "time_zone")
	if tz_name and is_valid_timezone(tz_name):
		return tz_name
	return settings.default_timezone


def _to_db_datetime(value):
	return ensure_utc(value).replace(tzinfo=None) if value else None


def _child_rows(doctype: str, parent_doctype: str, parents: List[str], fields: List[str]) -> Dict[str, List[Any]]:
	"""Filas de una child table agrupadas por parent, en orden idx."""
	if not parents:
		return {}

	rows = frappe.get_all(
		doctype,
		filters={"parent": ["in", parents], "parenttype": parent_doctype},
		fields=["parent"] + fields,
		order_by="idx asc"
	)

	grouped: Dict[str, List[Any]] = {}
	for row in rows:
		grouped.setdefault(row.parent, []).append(row)
	return grouped


def event_type_from_row(row: Any, questions: List[Any]) -> EventType:
	return EventType.from_dict({
		**row,
		"id": row.name,
		"owner": row.booking_owner,
		"custom_questions": [
			{
				"id": q.question_id,
				"label": q.label,
				"type": q.question_type,
				"required": q.required,
			}
			for q in questions
		],
	})


def booking_from_row(row: Any, answers: List[Any]) -> Booking:
	return Booking.from_dict({
		**row,
		"id": row.name,
		"owner": row.booking_owner,
		"event_type_id": row.event_type,
		"created_at": row.booked_at,
		"guests": [g.strip() for g in (row.guests or "").splitlines() if g.strip()],
		"custom_answers": [
			{"question_id": a.question_id, "label": a.label, "answer": a.answer}
			for a in answers
		],
	})


class FrappeBookingStore(BookingStore):
	"""Store sobre DocTypes de Frappe."""

	# ===== EVENT TYPES =====

	def list_event_types(self, owner: Optional[str] = None) -> List[EventType]:
		filters = {"booking_owner": owner} if owner else {}
		rows = frappe.get_all("Booking Event Type", filters=filters, fields=EVENT_TYPE_FIELDS)
		questions = _child_rows(
			"Booking Custom Question",
			"Booking Event Type",
			[row.name for row in rows],
			["question_id", "label", "question_type", "required"]
		)
		return [event_type_from_row(row, questions.get(row.name, [])) for row in rows]

	def get_event_type(self, event_type_id: str) -> Optional[EventType]:
		if not event_type_id or not frappe.db.exists("Booking Event Type", event_type_id):
			return None
		return self._single_event_type({"name": event_type_id})

	def get_event_type_by_slug(self, owner: str, slug: str) -> Optional[EventType]:
		return self._single_event_type({"booking_owner": owner, "slug": slug})

	def _single_event_type(self, filters: Dict[str, Any]) -> Optional[EventType]:
		rows = frappe.get_all("Booking Event Type", filters=filters, fields=EVENT_TYPE_FIELDS, limit=1)
		if not rows:
			return None
		questions = _child_rows(
			"Booking Custom Question",
			"Booking Event Type",
			[rows[0].name],
			["question_id", "label", "question_type", "required"]
		)
		return event_type_from_row(rows[0], questions.get(rows[0].name, []))

	# ===== AVAILABILITY RULES =====

	def list_rules(self, owner: Optional[str] = None) -> List[AvailabilityRule]:
		filters = {"booking_owner": owner} if owner else {}
		rows = frappe.get_all("Availability Rule", filters=filters, fields=RULE_FIELDS)
		return [
			rule_from_dict({**row, "id": row.name, "owner": row.booking_owner})
			for row in rows
		]

	# ===== BOOKINGS =====

	def list_bookings(self, owner: Optional[str] = None) -> List[Booking]:
		filters = {"booking_owner": owner} if owner else {}
		rows = frappe.get_all(
			"Booking", filters=filters, fields=BOOKING_FIELDS, order_by="start_time asc"
		)
		answers = _child_rows(
			"Booking Custom Answer",
			"Booking",
			[row.name for row in rows],
			["question_id", "label", "answer"]
		)
		return [booking_from_row(row, answers.get(row.name, [])) for row in rows]

	def get_booking(self, booking_id: str) -> Optional[Booking]:
		rows = frappe.get_all("Booking", filters={"name": booking_id}, fields=BOOKING_FIELDS, limit=1)
		if not rows:
			return None
		answers = _child_rows(
			"Booking Custom Answer", "Booking", [booking_id], ["question_id", "label", "answer"]
		)
		return booking_from_row(rows[0], answers.get(booking_id, []))

	def add_booking(self, booking: Booking) -> Booking:
		doc = frappe.get_doc({
			"doctype": "Booking",
			**self._booking_values(booking),
			"custom_answers": [
				{"question_id": a.question_id, "label": a.label, "answer": a.answer}
				for a in booking.custom_answers
			],
		})
		doc.insert(ignore_permissions=True, set_name=booking.id)
		return booking

	def update_booking(self, booking: Booking) -> Booking:
		# Las respuestas son inmutables: solo se actualizan los campos del booking
		doc = frappe.get_doc("Booking", booking.id)
		doc.update(self._booking_values(booking))
		doc.save(ignore_permissions=True)
		return booking

	def _booking_values(self, booking: Booking) -> Dict[str, Any]:
		return {
			"booking_owner": booking.owner,
			"event_type": booking.event_type_id,
			"attendee_name": booking.attendee_name,
			"attendee_email": booking.attendee_email,
			"attendee_timezone": booking.attendee_timezone,
			"start_time": _to_db_datetime(booking.start_time),
			"end_time": _to_db_datetime(booking.end_time),
			"status": booking.status.value,
			"meeting_link": booking.meeting_link,
			"booked_at": _to_db_datetime(booking.created_at),
			"cancel_reason": booking.cancel_reason,
			"notes": booking.notes,
			"guests": "\n".join(booking.guests),
		}

	@contextmanager
	def lock(self, owner: str) -> Iterator[None]:
		# SELECT ... FOR UPDATE sobre el User del owner
		frappe.db.get_value("User", owner, "name", for_update=True)
		yield


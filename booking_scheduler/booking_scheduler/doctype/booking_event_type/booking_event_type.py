# Copyright (c) 2026, Booking Scheduler Team and contributors
# For license information, please see license.txt

"""
Booking Event Type DocType

Plantilla de reunión agendable de un owner (duración, ubicación, buffers,
preguntas al attendee).
"""

import re

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint, getdate

from booking_scheduler.booking_scheduler.scheduling.frappe_store import get_scheduling_settings
from booking_scheduler.booking_scheduler.scheduling.models import LocationType, QuestionType


SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def slugify(text: str) -> str:
	"""'Intro Call (30 min)' -> 'intro-call-30-min'."""
	return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


class BookingEventType(Document):
	"""
	Booking Event Type with write-boundary validation.

	Validations:
	- slug URL-safe and unique per owner (autogenerado desde title si falta)
	- duration_minutes >= min_duration_minutes
	- buffers y min notice >= 0
	- date_range_start <= date_range_end
	- max_bookings_per_day >= 0 (0 = sin tope)
	- custom questions con id único y tipo conocido
	"""

	def validate(self) -> None:
		self._set_booking_owner()
		self._validate_title()
		self._validate_slug()
		self._validate_location_type()
		self._validate_durations()
		self._validate_date_range()
		self._validate_daily_cap()
		self._validate_custom_questions()

	def _set_booking_owner(self) -> None:
		if not self.booking_owner:
			self.booking_owner = frappe.session.user

	def _validate_title(self) -> None:
		if not (self.title or "").strip():
			frappe.throw(_("Title is required"))

	def _validate_slug(self) -> None:
		"""Valida formato y unicidad del slug para el owner."""
		if not self.slug:
			self.slug = slugify(self.title)

		if not SLUG_PATTERN.match(self.slug or ""):
			frappe.throw(_("Slug may only contain lowercase letters, numbers and hyphens"))

		duplicate = frappe.db.exists(
			"Booking Event Type",
			{
				"booking_owner": self.booking_owner,
				"slug": self.slug,
				"name": ["!=", self.name],
			}
		)
		if duplicate:
			frappe.throw(_("Slug '{0}' is already used by {1}").format(self.slug, duplicate))

	def _validate_location_type(self) -> None:
		valid = [location.value for location in LocationType]
		if self.location_type not in valid:
			frappe.throw(_("Location Type must be one of: {0}").format(", ".join(valid)))

	def _validate_durations(self) -> None:
		min_duration = get_scheduling_settings().min_duration_minutes
		if cint(self.duration_minutes) < min_duration:
			frappe.throw(_("Duration must be at least {0} minutes").format(min_duration))

		for fieldname in ("buffer_before_mins", "buffer_after_mins", "min_notice_mins"):
			if cint(self.get(fieldname)) < 0:
				frappe.throw(_("{0} cannot be negative").format(self.meta.get_label(fieldname)))

	def _validate_date_range(self) -> None:
		if self.date_range_start and self.date_range_end:
			if getdate(self.date_range_start) > getdate(self.date_range_end):
				frappe.throw(_("Date Range Start must be on or before Date Range End"))

	def _validate_daily_cap(self) -> None:
		if self.max_bookings_per_day is not None and cint(self.max_bookings_per_day) < 0:
			frappe.throw(_("Max Bookings Per Day cannot be negative (0 means no limit)"))

	def _validate_custom_questions(self) -> None:
		"""Cada pregunta necesita label, id único y un tipo conocido."""
		valid_types = [question_type.value for question_type in QuestionType]
		seen = set()

		for idx, question in enumerate(self.custom_questions or [], 1):
			if not (question.label or "").strip():
				frappe.throw(_("Row {0}: Label is required").format(idx))

			if not question.question_id:
				question.question_id = slugify(question.label).replace("-", "_") or f"q{idx}"

			if question.question_id in seen:
				frappe.throw(_("Row {0}: Question ID '{1}' is repeated").format(idx, question.question_id))
			seen.add(question.question_id)

			if question.question_type not in valid_types:
				frappe.throw(_("Row {0}: Question Type must be one of: {1}").format(idx, ", ".join(valid_types)))

# Copyright (c) 2026, Booking Scheduler Team and contributors
# For license information, please see license.txt

"""
Booking DocType

Reserva de un attendee sobre un Booking Event Type. Los bookings públicos se
crean vía api.booking_api.submit_booking (admisión con re-chequeo bajo lock);
este controller solo valida la forma del documento.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from booking_scheduler.booking_scheduler.scheduling.admission import new_booking_id
from booking_scheduler.booking_scheduler.scheduling.models import BookingStatus


class Booking(Document):
	"""
	Booking with write-boundary validation.

	Validations:
	- start_time < end_time
	- status cancelled es terminal
	- cancel_reason solo en bookings cancelados
	- booking_owner copiado del Event Type si falta
	"""

	def autoname(self) -> None:
		self.name = new_booking_id()

	def validate(self) -> None:
		self._validate_times()
		self._validate_status_transition()
		self._validate_cancel_reason()
		self._set_booking_owner()

	def _validate_times(self) -> None:
		"""Valida que start_time < end_time."""
		if not self.start_time or not self.end_time:
			frappe.throw(_("Start Time and End Time are required"))

		if get_datetime(self.start_time) >= get_datetime(self.end_time):
			frappe.throw(_("Start Time must be before End Time"))

	def _validate_status_transition(self) -> None:
		previous = self.get_doc_before_save()
		if not previous:
			return

		if previous.status == BookingStatus.CANCELLED.value and self.status != previous.status:
			frappe.throw(_("A cancelled booking cannot change status"))

	def _validate_cancel_reason(self) -> None:
		if self.status != BookingStatus.CANCELLED.value and self.cancel_reason:
			frappe.throw(_("Cancel Reason can only be set on cancelled bookings"))

	def _set_booking_owner(self) -> None:
		if not self.booking_owner and self.event_type:
			self.booking_owner = frappe.db.get_value("Booking Event Type", self.event_type, "booking_owner")

# Copyright (c) 2026, Booking Scheduler Team and Contributors
# See license.txt

"""
Tests for Booking DocType

Tests validation and the Frappe-backed admission flow.
"""

from datetime import datetime

import frappe
import pytz
from frappe.tests.utils import FrappeTestCase

from booking_scheduler.booking_scheduler.scheduling.admission import cancel_booking, submit_booking
from booking_scheduler.booking_scheduler.scheduling.errors import SlotNoLongerAvailable
from booking_scheduler.booking_scheduler.scheduling.frappe_store import FrappeBookingStore
from booking_scheduler.booking_scheduler.scheduling.models import BookingRequest, BookingStatus


NOW = datetime(2026, 3, 1, 0, 0, tzinfo=pytz.utc)


class TestBooking(FrappeTestCase):
	"""Tests for Booking DocType."""

	def setUp(self):
		"""Set up test data before each test."""
		if not frappe.db.exists("Booking Event Type", {"booking_owner": "Administrator", "slug": "test-intro"}):
			frappe.get_doc({
				"doctype": "Booking Event Type",
				"booking_owner": "Administrator",
				"title": "Test Intro",
				"slug": "test-intro",
				"duration_minutes": 30,
				"location_type": "google_meet",
				"is_active": 1,
			}).insert(ignore_permissions=True)

		# Martes 09:00-17:00 UTC: 2026-03-03 10:00Z es un slot listable
		if not frappe.db.exists(
			"Availability Rule",
			{"booking_owner": "Administrator", "rule_type": "recurring", "day_of_week": 2}
		):
			frappe.get_doc({
				"doctype": "Availability Rule",
				"booking_owner": "Administrator",
				"rule_type": "recurring",
				"day_of_week": 2,
				"start_time": "09:00",
				"end_time": "17:00",
			}).insert(ignore_permissions=True)

		self.event_type = frappe.db.get_value(
			"Booking Event Type", {"booking_owner": "Administrator", "slug": "test-intro"}, "name"
		)

	def make_booking(self, **values):
		doc = {
			"doctype": "Booking",
			"event_type": self.event_type,
			"attendee_name": "Ana",
			"attendee_email": "ana@example.com",
			"attendee_timezone": "UTC",
			"start_time": "2026-03-02 09:00:00",
			"end_time": "2026-03-02 09:30:00",
			"status": "confirmed",
		}
		doc.update(values)
		return frappe.get_doc(doc)

	def test_start_before_end(self):
		booking = self.make_booking(end_time="2026-03-02 09:00:00")
		with self.assertRaises(frappe.ValidationError):
			booking.insert(ignore_permissions=True)

	def test_owner_copied_from_event_type(self):
		booking = self.make_booking().insert(ignore_permissions=True)
		self.assertEqual(booking.booking_owner, "Administrator")
		self.assertTrue(booking.name.startswith("bk_"))

	def test_cancel_reason_only_when_cancelled(self):
		booking = self.make_booking(cancel_reason="No longer needed")
		with self.assertRaises(frappe.ValidationError):
			booking.insert(ignore_permissions=True)

	def test_cancelled_is_terminal(self):
		booking = self.make_booking(status="cancelled", cancel_reason="Owner away").insert(ignore_permissions=True)
		booking.status = "confirmed"
		booking.cancel_reason = None
		with self.assertRaises(frappe.ValidationError):
			booking.save(ignore_permissions=True)

	def test_submit_through_store(self):
		store = FrappeBookingStore()
		request = BookingRequest(
			event_type_id=self.event_type,
			attendee_name="Bob",
			attendee_email="bob@example.com",
			attendee_timezone="UTC",
			start_time=datetime(2026, 3, 3, 10, 0, tzinfo=pytz.utc),
			end_time=datetime(2026, 3, 3, 10, 30, tzinfo=pytz.utc),
		)

		booking = submit_booking(store, request, "UTC", NOW)
		stored = store.get_booking(booking.id)
		self.assertEqual(stored.start_time, request.start_time)
		self.assertEqual(stored.status, BookingStatus.CONFIRMED)

		with self.assertRaises(SlotNoLongerAvailable):
			submit_booking(store, request, "UTC", NOW)

		cancel_booking(store, booking.id)
		self.assertEqual(store.get_booking(booking.id).cancel_reason, "Cancelled by owner")

"""
Tests for scheduling/booking_list.py
"""

import unittest
from datetime import datetime, timedelta

import pytz

from booking_scheduler.booking_scheduler.scheduling.booking_list import (
	filter_bookings,
	is_upcoming,
	summarize_bookings,
)
from booking_scheduler.booking_scheduler.scheduling.models import Booking, BookingStatus, EventType


NOW = datetime(2026, 3, 2, 12, 0, tzinfo=pytz.utc)


def make_booking(booking_id, hour, status=BookingStatus.CONFIRMED, name="Ana Perez", email="ana@example.com"):
	start = datetime(2026, 3, 2, hour, 0, tzinfo=pytz.utc)
	return Booking(
		id=booking_id,
		owner="dwayne",
		event_type_id="et-intro",
		attendee_name=name,
		attendee_email=email,
		attendee_timezone="UTC",
		start_time=start,
		end_time=start + timedelta(minutes=30),
		status=status,
	)


class TestBookingList(unittest.TestCase):

	def setUp(self):
		self.event_types = [
			EventType(id="et-intro", owner="dwayne", slug="intro", title="Intro Call", duration_minutes=30)
		]
		self.bookings = [
			make_booking("bk_past", 9),
			make_booking("bk_noon", 12, name="Carla Diaz", email="carla@example.com"),
			make_booking("bk_cancelled", 14, status=BookingStatus.CANCELLED),
			make_booking("bk_moved", 16, status=BookingStatus.RESCHEDULED, email="bruno@example.com"),
		]

	def ids(self, **kwargs):
		return [b.id for b in filter_bookings(self.bookings, self.event_types, NOW, **kwargs)]

	def test_newest_first(self):
		self.assertEqual(self.ids(), ["bk_moved", "bk_cancelled", "bk_noon", "bk_past"])

	def test_status_filter(self):
		self.assertEqual(self.ids(status="cancelled"), ["bk_cancelled"])
		self.assertEqual(self.ids(status="confirmed"), ["bk_noon", "bk_past"])

	def test_upcoming(self):
		"""Confirmed and starting at or after now."""
		self.assertEqual(self.ids(status="upcoming"), ["bk_noon"])
		self.assertTrue(is_upcoming(self.bookings[1], NOW))
		self.assertFalse(is_upcoming(self.bookings[3], NOW))

	def test_search(self):
		self.assertEqual(self.ids(search="carla"), ["bk_noon"])
		self.assertEqual(self.ids(search="BRUNO@"), ["bk_moved"])
		self.assertEqual(len(self.ids(search="intro call")), 4)
		self.assertEqual(self.ids(search="nobody"), [])

	def test_search_with_deleted_event_type(self):
		self.assertEqual(
			[b.id for b in filter_bookings(self.bookings, [], NOW, search="intro")], []
		)

	def test_unknown_filter(self):
		with self.assertRaises(ValueError):
			self.ids(status="archived")

	def test_summary(self):
		self.assertEqual(summarize_bookings(self.bookings, NOW), {
			"total": 4,
			"confirmed": 2,
			"cancelled": 1,
			"rescheduled": 1,
			"upcoming": 1,
		})

"""
Tests for scheduling/admission.py

Tests booking validation, conflict re-check on submit, cancellation and
rescheduling against an in-memory store.
"""

import itertools
import unittest
from datetime import date, datetime, timedelta

import pytz

from booking_scheduler.booking_scheduler.scheduling.admission import (
	cancel_booking,
	is_valid_email,
	new_booking_id,
	reschedule_booking,
	submit_booking,
	validate_booking_request,
)
from booking_scheduler.booking_scheduler.scheduling.config import SchedulingSettings
from booking_scheduler.booking_scheduler.scheduling.errors import (
	BookingNotFound,
	BookingValidationError,
	EventTypeNotFound,
	InvalidStatusTransition,
	SlotNoLongerAvailable,
)
from booking_scheduler.booking_scheduler.scheduling.models import (
	BookingRequest,
	BookingStatus,
	CustomQuestion,
	DayOffRule,
	EventType,
	LocationType,
	QuestionType,
	RecurringRule,
)
from booking_scheduler.booking_scheduler.scheduling.slots import get_available_slots
from booking_scheduler.booking_scheduler.scheduling.store import InMemoryBookingStore


OWNER_TZ = "Asia/Kolkata"
NOW = datetime(2026, 3, 2, 3, 0, tzinfo=pytz.utc)


def utc(hour, minute=0, day=2):
	return datetime(2026, 3, day, hour, minute, tzinfo=pytz.utc)


def make_event_type(**overrides):
	values = dict(
		id="et-intro",
		owner="dwayne",
		slug="intro-call",
		title="Intro Call",
		duration_minutes=30,
		location_type=LocationType.GOOGLE_MEET,
		buffer_after_mins=10,
		min_notice_mins=60,
		custom_questions=[
			CustomQuestion("company", "Company", QuestionType.TEXT, required=True),
			CustomQuestion("team_size", "Team size", QuestionType.NUMBER),
		],
	)
	values.update(overrides)
	return EventType(**values)


class AdmissionTestCase(unittest.TestCase):

	def setUp(self):
		self.event_type = make_event_type()
		self.store = InMemoryBookingStore(
			event_types=[self.event_type],
			rules=[RecurringRule("r-mon", "dwayne", 1, "09:00", "17:00")],
		)
		counter = itertools.count(1)
		self.id_factory = lambda: f"bk_{next(counter):012d}"

	def request(self, start=None, end=None, **overrides):
		start = start or utc(4)
		values = dict(
			event_type_id="et-intro",
			attendee_name="Ana Perez",
			attendee_email="ana@example.com",
			attendee_timezone="America/Bogota",
			start_time=start,
			end_time=end or start + timedelta(minutes=30),
			answers={"company": "Acme"},
		)
		values.update(overrides)
		return BookingRequest(**values)

	def submit(self, request=None, now=NOW):
		return submit_booking(
			self.store, request or self.request(), OWNER_TZ, now, id_factory=self.id_factory
		)


class TestValidation(AdmissionTestCase):
	"""Tests for validate_booking_request."""

	def validate(self, request, event_type=None):
		return validate_booking_request(request, event_type or self.event_type, OWNER_TZ, NOW)

	def test_valid_request(self):
		self.assertEqual(self.validate(self.request()), {})

	def test_all_errors_reported_together(self):
		request = self.request(
			attendee_name="  ",
			attendee_email="not-an-email",
			attendee_timezone="Nowhere/City",
			answers={},
		)
		errors = self.validate(request)
		self.assertEqual(errors["attendee_name"], "Name is required.")
		self.assertEqual(errors["attendee_email"], "Please enter a valid email address.")
		self.assertEqual(errors["attendee_timezone"], "Unknown timezone.")
		self.assertEqual(errors["company"], "Company is required.")

	def test_missing_email(self):
		errors = self.validate(self.request(attendee_email=""))
		self.assertEqual(errors["attendee_email"], "Email is required.")

	def test_number_question(self):
		errors = self.validate(self.request(answers={"company": "Acme", "team_size": "many"}))
		self.assertEqual(errors, {"team_size": "Team size must be a number."})
		self.assertEqual(self.validate(self.request(answers={"company": "Acme", "team_size": "12"})), {})

	def test_zero_is_an_answer(self):
		event_type = make_event_type(custom_questions=[
			CustomQuestion("seats", "Seats", QuestionType.NUMBER, required=True),
		])
		self.assertEqual(self.validate(self.request(answers={"seats": 0}), event_type), {})
		self.assertEqual(
			self.validate(self.request(answers={"seats": None}), event_type),
			{"seats": "Seats is required."}
		)

	def test_guests(self):
		errors = self.validate(self.request(guests=["bob@example.com", "bad", ""]))
		self.assertEqual(errors, {"guest_1": "Please enter a valid email address."})

		too_many = [f"g{i}@example.com" for i in range(6)]
		errors = self.validate(self.request(guests=too_many))
		self.assertEqual(errors["guests"], "You can add up to 5 guests.")

	def test_duration_must_match(self):
		errors = self.validate(self.request(start=utc(4), end=utc(5)))
		self.assertEqual(errors["start_time"], "Booking length must match the event duration.")

	def test_start_before_end(self):
		errors = self.validate(self.request(start=utc(5), end=utc(4)))
		self.assertEqual(errors["start_time"], "Start time must be before end time.")

	def test_too_soon(self):
		errors = self.validate(self.request(start=utc(3, 30), end=utc(4)))
		self.assertEqual(errors["start_time"], "This time is too soon to book.")

	def test_outside_booking_window(self):
		event_type = make_event_type(date_range_end=date(2026, 3, 1))
		errors = self.validate(self.request(), event_type)
		self.assertEqual(errors["start_time"], "This date is outside the booking window.")

	def test_inactive_event_type(self):
		errors = self.validate(self.request(), make_event_type(is_active=False))
		self.assertEqual(errors["event_type"], "This event type is not accepting bookings.")

	def test_email_pattern(self):
		self.assertTrue(is_valid_email("a@b.co"))
		self.assertFalse(is_valid_email("a@b"))
		self.assertFalse(is_valid_email("a b@c.com"))

	def test_new_booking_id(self):
		booking_id = new_booking_id()
		self.assertTrue(booking_id.startswith("bk_"))
		self.assertEqual(len(booking_id), 15)


class TestSubmitBooking(AdmissionTestCase):
	"""Tests for submit_booking."""

	def test_submit_creates_confirmed_booking(self):
		booking = self.submit()

		self.assertEqual(booking.id, "bk_000000000001")
		self.assertEqual(booking.status, BookingStatus.CONFIRMED)
		self.assertEqual(booking.owner, "dwayne")
		self.assertEqual(booking.start_time, utc(4))
		self.assertEqual(booking.meeting_link, "https://meet.google.com/mock-000000000001")
		self.assertEqual(booking.created_at, NOW)
		self.assertIs(self.store.get_booking(booking.id), booking)

	def test_answers_are_snapshotted(self):
		booking = self.submit()
		self.assertEqual(
			[(a.question_id, a.label, a.answer) for a in booking.custom_answers],
			[("company", "Company", "Acme"), ("team_size", "Team size", "")]
		)

		# Renombrar la pregunta no cambia lo ya guardado
		self.store.save_event_type(make_event_type(custom_questions=[
			CustomQuestion("company", "Organisation", QuestionType.TEXT, required=True),
		]))
		self.assertEqual(self.store.get_booking(booking.id).custom_answers[0].label, "Company")

	def test_unknown_event_type(self):
		with self.assertRaises(EventTypeNotFound):
			self.submit(self.request(event_type_id="et-missing"))

	def test_validation_error_carries_fields(self):
		with self.assertRaises(BookingValidationError) as ctx:
			self.submit(self.request(attendee_name=""))
		self.assertEqual(ctx.exception.errors, {"attendee_name": "Name is required."})
		self.assertEqual(self.store.list_bookings(), [])

	def test_double_booking_rejected(self):
		self.submit()
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(attendee_email="bob@example.com"))
		self.assertEqual(len(self.store.list_bookings()), 1)

	def test_buffer_blocks_adjacent_submit(self):
		"""buffer_after=10 on 04:00-04:30Z blocks a 04:30Z start."""
		self.submit()
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(start=utc(4, 30), end=utc(5)))

	def test_booked_slot_disappears_from_listing(self):
		self.submit()
		slots = get_available_slots(
			date(2026, 3, 2), self.event_type, self.store.list_rules(), self.store.list_bookings(),
			self.store.list_event_types(), OWNER_TZ, NOW
		)
		starts = [s.start for s in slots]
		self.assertNotIn(utc(4), starts)
		self.assertNotIn(utc(4, 30), starts)
		self.assertIn(utc(5), starts)

	def test_daily_cap(self):
		self.store.save_event_type(make_event_type(max_bookings_per_day=1))
		self.submit()
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(start=utc(8), end=utc(8, 30)))

	def test_day_off_rejected(self):
		self.store.save_rule(DayOffRule("off-mar-2", "dwayne", date(2026, 3, 2)))
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit()
		self.assertEqual(self.store.list_bookings(), [])

	def test_weekday_without_rule_rejected(self):
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(start=utc(4, day=3)))

	def test_off_grid_start_rejected(self):
		"""09:37 IST is not on the 30-minute grid that starts at 09:00."""
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(start=utc(4, 7)))

	def test_number_answer_zero_snapshotted(self):
		booking = self.submit(self.request(answers={"company": "Acme", "team_size": 0}))
		self.assertEqual(booking.custom_answers[1].answer, "0")

	def test_no_link_for_phone(self):
		self.store.save_event_type(make_event_type(location_type=LocationType.PHONE))
		self.assertEqual(self.submit().meeting_link, "")

	def test_custom_base_url(self):
		settings = SchedulingSettings.from_dict({
			"meeting_link_base_urls": {"google_meet": "https://meet.example.test"}
		})
		booking = submit_booking(
			self.store, self.request(), OWNER_TZ, NOW, settings, id_factory=self.id_factory
		)
		self.assertEqual(booking.meeting_link, "https://meet.example.test/mock-000000000001")


class TestCancelAndReschedule(AdmissionTestCase):
	"""Tests for cancel_booking and reschedule_booking."""

	def test_cancel_with_default_reason(self):
		booking = self.submit()
		cancelled = cancel_booking(self.store, booking.id)

		self.assertEqual(cancelled.status, BookingStatus.CANCELLED)
		self.assertEqual(cancelled.cancel_reason, "Cancelled by owner")
		self.assertEqual(self.store.get_booking(booking.id).status, BookingStatus.CANCELLED)

	def test_cancel_with_reason(self):
		booking = self.submit()
		cancelled = cancel_booking(self.store, booking.id, "Attendee asked")
		self.assertEqual(cancelled.cancel_reason, "Attendee asked")

	def test_cancel_frees_slot(self):
		booking = self.submit()
		cancel_booking(self.store, booking.id)
		again = self.submit(self.request(attendee_email="bob@example.com"))
		self.assertEqual(again.start_time, utc(4))

	def test_cancel_twice_rejected(self):
		booking = self.submit()
		cancel_booking(self.store, booking.id)
		with self.assertRaises(InvalidStatusTransition):
			cancel_booking(self.store, booking.id)

	def test_cancel_unknown(self):
		with self.assertRaises(BookingNotFound):
			cancel_booking(self.store, "bk_missing")

	def test_reschedule_keeps_identity(self):
		booking = self.submit()
		moved = reschedule_booking(self.store, booking.id, utc(6), utc(6, 30))

		self.assertEqual(moved.id, booking.id)
		self.assertEqual(moved.status, BookingStatus.RESCHEDULED)
		self.assertEqual(moved.meeting_link, booking.meeting_link)
		self.assertEqual(self.store.get_booking(booking.id).start_time, utc(6))

	def test_reschedule_overlapping_itself(self):
		booking = self.submit()
		moved = reschedule_booking(self.store, booking.id, utc(4, 15), utc(4, 45))
		self.assertEqual(moved.start_time, utc(4, 15))

	def test_reschedule_conflict(self):
		first = self.submit()
		second = self.submit(self.request(start=utc(6), end=utc(6, 30), attendee_email="bob@example.com"))
		with self.assertRaises(SlotNoLongerAvailable):
			reschedule_booking(self.store, second.id, first.start_time, first.end_time)

	def test_reschedule_cancelled(self):
		booking = self.submit()
		cancel_booking(self.store, booking.id)
		with self.assertRaises(InvalidStatusTransition):
			reschedule_booking(self.store, booking.id, utc(6), utc(6, 30))

	def test_reschedule_invalid_range(self):
		booking = self.submit()
		with self.assertRaises(ValueError):
			reschedule_booking(self.store, booking.id, utc(6), utc(6))

	def test_rescheduled_booking_still_blocks(self):
		booking = self.submit()
		reschedule_booking(self.store, booking.id, utc(6), utc(6, 30))
		with self.assertRaises(SlotNoLongerAvailable):
			self.submit(self.request(start=utc(6), end=utc(6, 30), attendee_email="bob@example.com"))

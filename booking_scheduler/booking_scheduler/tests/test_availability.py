"""
Tests for scheduling/availability.py

Tests effective rule resolution (override precedence) and rule set integrity.
"""

import unittest
from datetime import date

from booking_scheduler.booking_scheduler.scheduling.availability import (
	day_of_week,
	get_overrides,
	is_day_available,
	resolve_effective_rule,
	validate_rule_set,
)
from booking_scheduler.booking_scheduler.scheduling.errors import DuplicateRuleError
from booking_scheduler.booking_scheduler.scheduling.models import DayOffRule, OneTimeRule, RecurringRule


def weekly_rules(owner="dwayne"):
	"""Lunes a viernes 09:00-17:00, fines de semana marcados no disponibles."""
	rules = [
		RecurringRule(f"{owner}-dow-{dow}", owner, dow, "09:00", "17:00")
		for dow in range(1, 6)
	]
	rules.append(RecurringRule(f"{owner}-dow-0", owner, 0, is_available=False))
	rules.append(RecurringRule(f"{owner}-dow-6", owner, 6, is_available=False))
	return rules


class TestAvailability(unittest.TestCase):
	"""Tests for availability rule resolution."""

	def setUp(self):
		self.rules = weekly_rules() + [
			OneTimeRule("ot-1", "dwayne", date(2026, 3, 9), "13:00", "17:00"),
			DayOffRule("off-1", "dwayne", date(2026, 3, 16)),
		]

	def test_day_of_week_sunday_is_zero(self):
		self.assertEqual(day_of_week(date(2026, 3, 1)), 0)
		self.assertEqual(day_of_week(date(2026, 3, 2)), 1)
		self.assertEqual(day_of_week(date(2026, 3, 7)), 6)

	def test_recurring_rule_applies(self):
		rule = resolve_effective_rule(date(2026, 3, 2), self.rules)
		self.assertEqual(rule.id, "dwayne-dow-1")
		self.assertEqual(rule.start_time, "09:00")

	def test_one_time_override_wins(self):
		"""A one-time rule replaces the Monday recurring hours for that date."""
		rule = resolve_effective_rule("2026-03-09", self.rules)
		self.assertEqual(rule.id, "ot-1")
		self.assertEqual((rule.start_time, rule.end_time), ("13:00", "17:00"))

	def test_day_off_override_wins(self):
		rule = resolve_effective_rule(date(2026, 3, 16), self.rules)
		self.assertEqual(rule.id, "off-1")
		self.assertFalse(rule.is_available)

	def test_no_rule_returns_none(self):
		rules = [r for r in self.rules if getattr(r, "day_of_week", None) != 2]
		self.assertIsNone(resolve_effective_rule(date(2026, 3, 3), rules))

	def test_other_owner_rules_ignored(self):
		rules = self.rules + weekly_rules(owner="maria")
		rule = resolve_effective_rule(date(2026, 3, 9), rules, owner="maria")
		self.assertEqual(rule.id, "maria-dow-1")

	def test_overrides_sorted(self):
		rules = [
			DayOffRule("b", "dwayne", date(2026, 4, 1)),
			DayOffRule("a", "dwayne", date(2026, 3, 1)),
		]
		self.assertEqual([r.id for r in get_overrides(rules)], ["a", "b"])

	def test_is_day_available(self):
		today = date(2026, 3, 2)
		self.assertTrue(is_day_available(date(2026, 3, 3), self.rules, today))
		self.assertFalse(is_day_available(date(2026, 3, 7), self.rules, today))
		self.assertFalse(is_day_available(date(2026, 3, 16), self.rules, today))

	def test_past_day_never_available(self):
		self.assertFalse(is_day_available(date(2026, 2, 23), self.rules, date(2026, 3, 2)))


class TestRuleSetIntegrity(unittest.TestCase):
	"""Tests for duplicate detection."""

	def test_valid_rule_set(self):
		validate_rule_set(weekly_rules() + weekly_rules(owner="maria"))

	def test_duplicate_weekday_raises(self):
		rules = weekly_rules() + [RecurringRule("extra", "dwayne", 1, "10:00", "12:00")]
		with self.assertRaises(DuplicateRuleError):
			validate_rule_set(rules)

	def test_duplicate_override_raises(self):
		rules = [
			OneTimeRule("ot", "dwayne", date(2026, 3, 9), "13:00", "17:00"),
			DayOffRule("off", "dwayne", date(2026, 3, 9)),
		]
		with self.assertRaises(DuplicateRuleError):
			validate_rule_set(rules)

	def test_override_and_recurring_coexist(self):
		rules = weekly_rules() + [DayOffRule("off", "dwayne", date(2026, 3, 9))]
		validate_rule_set(rules)

# Copyright (c) 2026, Booking Scheduler Team and contributors
# For license information, please see license.txt

"""
Availability Rule DocType

Una regla de disponibilidad del owner: recurrente semanal, horario puntual
(one_time) o día libre (day_off). Las horas son "HH:mm" en el timezone del
owner.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from booking_scheduler.booking_scheduler.scheduling.availability import validate_rule_set
from booking_scheduler.booking_scheduler.scheduling.errors import DuplicateRuleError, InvalidRuleError
from booking_scheduler.booking_scheduler.scheduling.frappe_store import FrappeBookingStore
from booking_scheduler.booking_scheduler.scheduling.models import (
	AvailabilityRule as Rule,
	RuleType,
	rule_from_dict,
	validate_rule_times,
)


class AvailabilityRule(Document):
	"""
	Availability Rule with validation.

	Validations:
	- Campos coherentes con rule_type (day_of_week solo en recurring,
	  date_override solo en overrides)
	- Horas HH:mm con start < end cuando la regla está disponible
	- A lo sumo un recurring por weekday y un override por fecha, por owner
	"""

	def validate(self) -> None:
		if not self.booking_owner:
			self.booking_owner = frappe.session.user

		self._normalize_fields()
		rule = self._to_rule()
		self._validate_unique(rule)

	def _normalize_fields(self) -> None:
		"""Limpia los campos que no aplican al rule_type."""
		if self.rule_type == RuleType.RECURRING.value:
			self.date_override = None
		else:
			self.day_of_week = None

		if self.rule_type == RuleType.DAY_OFF.value:
			self.is_available = 0
			self.start_time = None
			self.end_time = None
		elif self.rule_type == RuleType.ONE_TIME.value:
			self.is_available = 1

		for fieldname in ("start_time", "end_time"):
			if self.get(fieldname):
				self.set(fieldname, self.get(fieldname).strip())

	def _to_rule(self) -> Rule:
		"""Construye la regla del motor y valida sus horas."""
		try:
			rule = rule_from_dict({
				"id": self.name,
				"owner": self.booking_owner,
				"rule_type": self.rule_type,
				"day_of_week": self.day_of_week,
				"date_override": self.date_override,
				"start_time": self.start_time,
				"end_time": self.end_time,
				"is_available": self.is_available,
			})
			validate_rule_times(rule)
		except InvalidRuleError as e:
			frappe.throw(_(str(e)))

		return rule

	def _validate_unique(self, rule: Rule) -> None:
		others = [
			existing for existing in FrappeBookingStore().list_rules(self.booking_owner)
			if existing.id != self.name
		]

		try:
			validate_rule_set(others + [rule])
		except DuplicateRuleError:
			if rule.rule_type == RuleType.RECURRING:
				frappe.throw(_("There is already a weekly rule for this day"))
			frappe.throw(_("There is already an override for {0}").format(self.date_override))

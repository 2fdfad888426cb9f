"""
Booking Store

Repository interface the scheduling services read from and write to, plus
an in-memory implementation used by tests and plain-Python callers.
The Frappe-backed implementation lives in frappe_store.py.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from .availability import validate_rule_set
from .errors import BookingNotFound
from .models import AvailabilityRule, Booking, EventType, validate_rule_times


class BookingStore(ABC):
	"""
	Interfaz del store.

	Las lecturas deben reflejar la última escritura: submit_booking relee los
	bookings dentro de lock() justo antes de agregar uno nuevo.
	"""

	@abstractmethod
	def list_event_types(self, owner: Optional[str] = None) -> List[EventType]:
		pass

	@abstractmethod
	def get_event_type(self, event_type_id: str) -> Optional[EventType]:
		pass

	@abstractmethod
	def list_rules(self, owner: Optional[str] = None) -> List[AvailabilityRule]:
		pass

	@abstractmethod
	def list_bookings(self, owner: Optional[str] = None) -> List[Booking]:
		pass

	@abstractmethod
	def get_booking(self, booking_id: str) -> Optional[Booking]:
		pass

	@abstractmethod
	def add_booking(self, booking: Booking) -> Booking:
		pass

	@abstractmethod
	def update_booking(self, booking: Booking) -> Booking:
		pass

	@abstractmethod
	def lock(self, owner: str):
		"""Context manager que serializa re-check + escritura para un owner."""
		pass


class InMemoryBookingStore(BookingStore):
	"""Store en memoria con un lock por owner."""

	def __init__(
		self,
		event_types: Iterable[EventType] = (),
		rules: Iterable[AvailabilityRule] = (),
		bookings: Iterable[Booking] = ()
	):
		self._event_types: Dict[str, EventType] = {}
		self._rules: Dict[str, AvailabilityRule] = {}
		self._bookings: Dict[str, Booking] = {}
		self._locks: Dict[str, threading.RLock] = {}
		self._locks_guard = threading.Lock()

		for event_type in event_types:
			self.save_event_type(event_type)
		for rule in rules:
			self.save_rule(rule)
		for booking in bookings:
			self._bookings[booking.id] = booking

	# ===== EVENT TYPES =====

	def list_event_types(self, owner: Optional[str] = None) -> List[EventType]:
		return [et for et in self._event_types.values() if owner is None or et.owner == owner]

	def get_event_type(self, event_type_id: str) -> Optional[EventType]:
		return self._event_types.get(event_type_id)

	def get_event_type_by_slug(self, owner: str, slug: str) -> Optional[EventType]:
		for event_type in self.list_event_types(owner):
			if event_type.slug == slug:
				return event_type
		return None

	def save_event_type(self, event_type: EventType) -> EventType:
		"""Crea o reemplaza un Event Type. El slug debe ser único por owner."""
		existing = self.get_event_type_by_slug(event_type.owner, event_type.slug)
		if existing is not None and existing.id != event_type.id:
			raise ValueError(f"Slug '{event_type.slug}' already used by {existing.id}")
		self._event_types[event_type.id] = event_type
		return event_type

	def delete_event_type(self, event_type_id: str) -> None:
		# Los bookings conservan la referencia colgante
		self._event_types.pop(event_type_id, None)

	# ===== AVAILABILITY RULES =====

	def list_rules(self, owner: Optional[str] = None) -> List[AvailabilityRule]:
		return [rule for rule in self._rules.values() if owner is None or rule.owner == owner]

	def save_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
		"""
		Crea o reemplaza una regla.

		Raises:
			InvalidRuleError: si las horas no son válidas
			DuplicateRuleError: si choca con otra regla del mismo owner
		"""
		validate_rule_times(rule)
		candidate = dict(self._rules)
		candidate[rule.id] = rule
		validate_rule_set(candidate.values())
		self._rules[rule.id] = rule
		return rule

	def delete_rule(self, rule_id: str) -> None:
		self._rules.pop(rule_id, None)

	# ===== BOOKINGS =====

	def list_bookings(self, owner: Optional[str] = None) -> List[Booking]:
		return [b for b in self._bookings.values() if owner is None or b.owner == owner]

	def get_booking(self, booking_id: str) -> Optional[Booking]:
		return self._bookings.get(booking_id)

	def add_booking(self, booking: Booking) -> Booking:
		if booking.id in self._bookings:
			raise ValueError(f"Booking {booking.id} already exists")
		self._bookings[booking.id] = booking
		return booking

	def update_booking(self, booking: Booking) -> Booking:
		if booking.id not in self._bookings:
			raise BookingNotFound(booking.id)
		self._bookings[booking.id] = booking
		return booking

	@contextmanager
	def lock(self, owner: str) -> Iterator[None]:
		with self._locks_guard:
			owner_lock = self._locks.setdefault(owner, threading.RLock())
		with owner_lock:
			yield

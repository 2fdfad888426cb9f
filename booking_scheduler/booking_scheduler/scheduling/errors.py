"""
Scheduling Errors

Exceptions raised by the scheduling services. The services never log;
callers (DocTypes, API endpoints) decide how each error is presented.
"""

from typing import Dict, Optional


class SchedulingError(Exception):
	"""Base para todos los errores de scheduling."""
	pass


class InvalidRuleError(SchedulingError, ValueError):
	"""Availability rule mal formada (horas no parseables, campos faltantes)."""
	pass


class InvalidTimezoneError(SchedulingError, ValueError):
	"""Nombre de timezone IANA desconocido."""
	pass


class DuplicateRuleError(SchedulingError):
	"""Dos reglas compiten por el mismo weekday o la misma fecha."""
	pass


class EventTypeNotFound(SchedulingError):
	"""El Event Type referenciado no existe."""
	pass


class BookingNotFound(SchedulingError):
	"""El Booking referenciado no existe."""
	pass


class SlotNoLongerAvailable(SchedulingError):
	"""
	El slot fue tomado entre el listado y el envío.

	El caller debe volver a pedir la lista de slots.
	"""

	def __init__(self, message: Optional[str] = None):
		super().__init__(message or "This time slot is no longer available. Please pick another.")


class InvalidStatusTransition(SchedulingError):
	"""Transición de status no permitida (por ejemplo, desde cancelled)."""
	pass


class BookingValidationError(SchedulingError):
	"""
	Errores de validación de un booking, todos juntos.

	Attributes:
		errors: dict {campo: mensaje}, una entrada por campo inválido
	"""

	def __init__(self, errors: Dict[str, str]):
		self.errors = dict(errors)
		super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))

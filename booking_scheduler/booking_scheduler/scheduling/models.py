"""
Scheduling Data Model

Plain dataclasses for event types, availability rules and bookings. They
are what the scheduling services read; DocTypes and the in-memory store
convert to and from them with ``from_dict`` / ``as_dict``.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Union

from .errors import InvalidRuleError
from .timezones import parse_date, parse_hhmm, parse_instant, to_iso


class LocationType(str, Enum):
	GOOGLE_MEET = "google_meet"
	ZOOM = "zoom"
	PHONE = "phone"
	IN_PERSON = "in_person"


class QuestionType(str, Enum):
	TEXT = "text"
	TEXTAREA = "textarea"
	NUMBER = "number"


class BookingStatus(str, Enum):
	CONFIRMED = "confirmed"
	CANCELLED = "cancelled"
	RESCHEDULED = "rescheduled"


class RuleType(str, Enum):
	RECURRING = "recurring"
	ONE_TIME = "one_time"
	DAY_OFF = "day_off"


# Estados que ocupan el calendario
BLOCKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.RESCHEDULED})


def _optional_date(value: Any) -> Optional[date]:
	return parse_date(value) if value else None


def _int(value: Any, default: int = 0) -> int:
	return int(value) if value not in (None, "") else default


# ===== EVENT TYPES =====

@dataclass(frozen=True)
class CustomQuestion:
	id: str
	label: str
	type: QuestionType = QuestionType.TEXT
	required: bool = False

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "CustomQuestion":
		return cls(
			id=str(data.get("id") or data.get("question_id")),
			label=data.get("label") or "",
			type=QuestionType(data.get("type") or data.get("question_type") or "text"),
			required=bool(data.get("required")),
		)

	def as_dict(self) -> Dict[str, Any]:
		return {"id": self.id, "label": self.label, "type": self.type.value, "required": self.required}


@dataclass(frozen=True)
class EventType:
	"""Plantilla de reunión agendable."""

	id: str
	owner: str
	slug: str
	title: str
	duration_minutes: int
	location_type: LocationType = LocationType.GOOGLE_MEET
	description: str = ""
	buffer_before_mins: int = 0
	buffer_after_mins: int = 0
	min_notice_mins: int = 0
	is_active: bool = True
	custom_questions: List[CustomQuestion] = field(default_factory=list)
	date_range_start: Optional[date] = None
	date_range_end: Optional[date] = None
	max_bookings_per_day: Optional[int] = None
	color: str = "primary"

	def __post_init__(self):
		if self.duration_minutes is None or self.duration_minutes <= 0:
			raise ValueError(f"duration_minutes must be > 0 (event type {self.id})")
		for name in ("buffer_before_mins", "buffer_after_mins", "min_notice_mins"):
			if getattr(self, name) < 0:
				raise ValueError(f"{name} must be >= 0 (event type {self.id})")

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "EventType":
		return cls(
			id=str(data.get("id") or data.get("name")),
			owner=data.get("owner") or data.get("owner_slug") or "",
			slug=data.get("slug") or "",
			title=data.get("title") or "",
			duration_minutes=_int(data.get("duration_minutes")),
			location_type=LocationType(data.get("location_type") or "google_meet"),
			description=data.get("description") or "",
			buffer_before_mins=_int(data.get("buffer_before_mins")),
			buffer_after_mins=_int(data.get("buffer_after_mins")),
			min_notice_mins=_int(data.get("min_notice_mins")),
			is_active=bool(data.get("is_active", True)),
			custom_questions=[CustomQuestion.from_dict(q) for q in data.get("custom_questions") or []],
			date_range_start=_optional_date(data.get("date_range_start")),
			date_range_end=_optional_date(data.get("date_range_end")),
			max_bookings_per_day=_int(data.get("max_bookings_per_day"), None) or None,
			color=data.get("color") or "primary",
		)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"owner": self.owner,
			"slug": self.slug,
			"title": self.title,
			"description": self.description,
			"duration_minutes": self.duration_minutes,
			"location_type": self.location_type.value,
			"buffer_before_mins": self.buffer_before_mins,
			"buffer_after_mins": self.buffer_after_mins,
			"min_notice_mins": self.min_notice_mins,
			"is_active": self.is_active,
			"custom_questions": [q.as_dict() for q in self.custom_questions],
			"date_range_start": self.date_range_start.isoformat() if self.date_range_start else None,
			"date_range_end": self.date_range_end.isoformat() if self.date_range_end else None,
			"max_bookings_per_day": self.max_bookings_per_day,
			"color": self.color,
		}


# ===== AVAILABILITY RULES =====

@dataclass(frozen=True)
class RecurringRule:
	"""Disponibilidad semanal para un day_of_week (0=domingo .. 6=sábado)."""

	id: str
	owner: str
	day_of_week: int
	start_time: Optional[str] = None
	end_time: Optional[str] = None
	is_available: bool = True
	rule_type = RuleType.RECURRING

	def __post_init__(self):
		if not 0 <= self.day_of_week <= 6:
			raise InvalidRuleError(f"day_of_week must be 0..6, got {self.day_of_week}")


@dataclass(frozen=True)
class OneTimeRule:
	"""Horario propio para una fecha puntual; reemplaza al recurrente ese día."""

	id: str
	owner: str
	date_override: date
	start_time: str
	end_time: str
	rule_type = RuleType.ONE_TIME

	@property
	def is_available(self) -> bool:
		return True


@dataclass(frozen=True)
class DayOffRule:
	"""Bloquea una fecha completa."""

	id: str
	owner: str
	date_override: date
	rule_type = RuleType.DAY_OFF

	@property
	def is_available(self) -> bool:
		return False

	@property
	def start_time(self) -> None:
		return None

	@property
	def end_time(self) -> None:
		return None


AvailabilityRule = Union[RecurringRule, OneTimeRule, DayOffRule]
OVERRIDE_RULE_TYPES = (OneTimeRule, DayOffRule)


def rule_from_dict(data: Dict[str, Any]) -> AvailabilityRule:
	"""
	Construye la variante correcta según rule_type.

	Acepta tanto start_time/end_time como start_time_utc/end_time_utc
	(hora local del owner pese al nombre).

	Raises:
		InvalidRuleError: si rule_type es desconocido o faltan campos
	"""
	try:
		rule_type = RuleType(data.get("rule_type"))
	except ValueError:
		raise InvalidRuleError(f"Unknown rule_type: {data.get('rule_type')!r}")

	rule_id = str(data.get("id") or data.get("name") or "")
	owner = data.get("owner") or data.get("owner_slug") or ""
	start_time = data.get("start_time") or data.get("start_time_utc")
	end_time = data.get("end_time") or data.get("end_time_utc")

	if rule_type == RuleType.RECURRING:
		if data.get("day_of_week") in (None, ""):
			raise InvalidRuleError("Recurring rule requires day_of_week")
		return RecurringRule(
			id=rule_id,
			owner=owner,
			day_of_week=int(data["day_of_week"]),
			start_time=start_time,
			end_time=end_time,
			is_available=bool(data.get("is_available", True)),
		)

	if not data.get("date_override"):
		raise InvalidRuleError(f"{rule_type.value} rule requires date_override")

	override_date = parse_date(data["date_override"])

	if rule_type == RuleType.ONE_TIME:
		if not start_time or not end_time:
			raise InvalidRuleError("One-time rule requires start and end time")
		return OneTimeRule(
			id=rule_id,
			owner=owner,
			date_override=override_date,
			start_time=start_time,
			end_time=end_time,
		)

	return DayOffRule(id=rule_id, owner=owner, date_override=override_date)


def rule_as_dict(rule: AvailabilityRule) -> Dict[str, Any]:
	"""Forma plana con todos los campos (los que no aplican en None)."""
	override = getattr(rule, "date_override", None)
	return {
		"id": rule.id,
		"owner": rule.owner,
		"rule_type": rule.rule_type.value,
		"day_of_week": getattr(rule, "day_of_week", None),
		"date_override": override.isoformat() if override else None,
		"start_time": rule.start_time,
		"end_time": rule.end_time,
		"is_available": rule.is_available,
	}


def validate_rule_times(rule: AvailabilityRule) -> None:
	"""
	Verifica que las horas del rule parseen y que start < end si está disponible.

	Raises:
		InvalidRuleError
	"""
	if not rule.is_available:
		return
	start = parse_hhmm(rule.start_time)
	end = parse_hhmm(rule.end_time)
	if start >= end:
		raise InvalidRuleError(
			f"Rule {rule.id}: start time ({rule.start_time}) must be before end time ({rule.end_time})"
		)


# ===== BOOKINGS =====

@dataclass(frozen=True)
class CustomAnswer:
	question_id: str
	label: str
	answer: str

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "CustomAnswer":
		return cls(
			question_id=str(data.get("question_id")),
			label=data.get("label") or "",
			answer="" if data.get("answer") is None else str(data.get("answer")),
		)

	def as_dict(self) -> Dict[str, str]:
		return {"question_id": self.question_id, "label": self.label, "answer": self.answer}


@dataclass(frozen=True)
class Booking:
	"""Reserva confirmada o terminada. start/end son instantes UTC, [start, end)."""

	id: str
	owner: str
	event_type_id: str
	attendee_name: str
	attendee_email: str
	attendee_timezone: str
	start_time: datetime
	end_time: datetime
	status: BookingStatus = BookingStatus.CONFIRMED
	custom_answers: List[CustomAnswer] = field(default_factory=list)
	meeting_link: str = ""
	created_at: Optional[datetime] = None
	cancel_reason: Optional[str] = None
	notes: str = ""
	guests: List[str] = field(default_factory=list)

	def __post_init__(self):
		if self.start_time >= self.end_time:
			raise ValueError(f"Booking {self.id}: start_time must be before end_time")

	@property
	def is_blocking(self) -> bool:
		return self.status in BLOCKING_STATUSES

	def with_changes(self, **changes) -> "Booking":
		return replace(self, **changes)

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Booking":
		created_at = data.get("created_at")
		return cls(
			id=str(data.get("id") or data.get("name")),
			owner=data.get("owner") or "",
			event_type_id=str(data.get("event_type_id") or data.get("event_type") or ""),
			attendee_name=data.get("attendee_name") or "",
			attendee_email=data.get("attendee_email") or "",
			attendee_timezone=data.get("attendee_timezone") or "UTC",
			start_time=parse_instant(data["start_time"]),
			end_time=parse_instant(data["end_time"]),
			status=BookingStatus(data.get("status") or "confirmed"),
			custom_answers=[CustomAnswer.from_dict(a) for a in data.get("custom_answers") or []],
			meeting_link=data.get("meeting_link") or data.get("meet_link") or "",
			created_at=parse_instant(created_at) if created_at else None,
			cancel_reason=data.get("cancel_reason"),
			notes=data.get("notes") or "",
			guests=list(data.get("guests") or []),
		)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"owner": self.owner,
			"event_type_id": self.event_type_id,
			"attendee_name": self.attendee_name,
			"attendee_email": self.attendee_email,
			"attendee_timezone": self.attendee_timezone,
			"start_time": to_iso(self.start_time),
			"end_time": to_iso(self.end_time),
			"status": self.status.value,
			"custom_answers": [a.as_dict() for a in self.custom_answers],
			"meeting_link": self.meeting_link,
			"created_at": to_iso(self.created_at) if self.created_at else None,
			"cancel_reason": self.cancel_reason,
			"notes": self.notes,
			"guests": list(self.guests),
		}


@dataclass
class BookingRequest:
	"""Datos que envía el attendee al reservar."""

	event_type_id: str
	attendee_name: str
	attendee_email: str
	attendee_timezone: str
	start_time: datetime
	end_time: datetime
	notes: str = ""
	guests: List[str] = field(default_factory=list)
	answers: Dict[str, Any] = field(default_factory=dict)


class Slot(NamedTuple):
	"""Slot agendable [start, end) en UTC."""

	start: datetime
	end: datetime

	def as_dict(self) -> Dict[str, str]:
		return {"start": to_iso(self.start), "end": to_iso(self.end)}

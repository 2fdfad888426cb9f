"""
Time & Timezone Utilities

Conversions between an owner-local wall-clock time on a civil date and an
absolute UTC instant, plus display formatting. The UTC offset is always
resolved for the specific date through pytz, so DST transitions are honoured.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz

from .errors import InvalidRuleError, InvalidTimezoneError


_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def get_timezone(tz_name: str) -> pytz.tzinfo.BaseTzInfo:
	"""
	Devuelve el timezone pytz para un nombre IANA.

	Raises:
		InvalidTimezoneError: si el nombre no existe
	"""
	if not tz_name:
		raise InvalidTimezoneError("Timezone is required")

	try:
		return pytz.timezone(tz_name)
	except pytz.UnknownTimeZoneError:
		raise InvalidTimezoneError(f"Unknown timezone: {tz_name}")


def is_valid_timezone(tz_name: Optional[str]) -> bool:
	"""True si el nombre es un timezone IANA conocido."""
	if not tz_name:
		return False
	return tz_name in pytz.all_timezones_set


def parse_hhmm(value: Optional[str]) -> int:
	"""
	Convierte "HH:mm" a minutos desde medianoche.

	Un valor vacío o None vale 0. "24:00" se acepta como fin de día.

	Raises:
		InvalidRuleError: si el string no tiene forma HH:mm válida
	"""
	if not value:
		return 0

	match = _HHMM_RE.match(str(value).strip())
	if not match:
		raise InvalidRuleError(f"Invalid time '{value}', expected HH:mm")

	hours, minutes = int(match.group(1)), int(match.group(2))
	total = hours * 60 + minutes
	if minutes > 59 or total > 24 * 60:
		raise InvalidRuleError(f"Invalid time '{value}', expected HH:mm")

	return total


def format_hhmm(minutes: int) -> str:
	"""Minutos desde medianoche -> "HH:mm"."""
	return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: Union[date, str]) -> date:
	"""
	Acepta date o string "YYYY-MM-DD".

	Raises:
		ValueError: si el formato es inválido
	"""
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def ensure_utc(value: datetime) -> datetime:
	"""Normaliza un datetime a UTC aware. Un datetime naive se interpreta como UTC."""
	if value.tzinfo is None:
		return pytz.utc.localize(value)
	return value.astimezone(pytz.utc)


def parse_instant(value: Union[datetime, str]) -> datetime:
	"""
	Parsea un instante ISO-8601 ("2026-03-02T04:00:00Z", con offset o naive UTC).

	Returns:
		datetime aware en UTC
	"""
	if isinstance(value, datetime):
		return ensure_utc(value)

	text = str(value).strip()
	if text.endswith("Z"):
		text = text[:-1] + "+00:00"
	return ensure_utc(datetime.fromisoformat(text))


def to_iso(value: datetime) -> str:
	"""Instante -> "YYYY-MM-DDTHH:MM:SSZ"."""
	return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def local_to_utc(target_date: date, minutes: int, tz_name: str) -> Optional[datetime]:
	"""
	Interpreta (fecha civil, minutos desde medianoche) en tz_name y devuelve el instante UTC.

	Args:
		target_date: fecha civil del owner
		minutes: hora local expresada en minutos (0..1440)
		tz_name: timezone IANA del owner

	Returns:
		datetime aware en UTC, o None si la hora local no existe ese día
		(salto de primavera). Una hora ambigua (otoño) resuelve a la primera
		ocurrencia.
	"""
	tz = get_timezone(tz_name)
	naive = datetime.combine(target_date, datetime.min.time()) + timedelta(minutes=minutes)

	try:
		local = tz.localize(naive, is_dst=None)
	except pytz.AmbiguousTimeError:
		local = tz.localize(naive, is_dst=True)
	except pytz.NonExistentTimeError:
		return None

	return local.astimezone(pytz.utc)


def utc_to_local(instant: datetime, tz_name: str) -> datetime:
	"""Instante absoluto -> datetime aware en tz_name (para mostrar)."""
	return ensure_utc(instant).astimezone(get_timezone(tz_name))


def local_date(instant: datetime, tz_name: str) -> date:
	"""Fecha civil de un instante en tz_name."""
	return utc_to_local(instant, tz_name).date()


def format_slot_time(instant: datetime, tz_name: str) -> str:
	"""Hora de un slot en tz_name, ej. "09:30 AM"."""
	return utc_to_local(instant, tz_name).strftime("%I:%M %p")


def format_date_heading(target_date: Union[date, str]) -> str:
	"""Fecha civil como "Monday, March 2, 2026"."""
	d = parse_date(target_date)
	return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def format_datetime_display(instant: datetime, tz_name: str) -> str:
	"""Instante como "Monday, March 2, 2026 at 09:30 AM" en tz_name."""
	local = utc_to_local(instant, tz_name)
	return f"{format_date_heading(local.date())} at {local.strftime('%I:%M %p')}"

"""
Calendar Invite Links

"Add to calendar" URLs for a booked slot. Pure formatting, independent of
the scheduling services.
"""

from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from booking_scheduler.booking_scheduler.scheduling.timezones import ensure_utc


GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
OUTLOOK_CALENDAR_URL = "https://outlook.live.com/calendar/0/deeplink/compose"


def to_gcal_date(instant: datetime) -> str:
	"""Instante -> "20260303T090000Z" (formato compacto de Google Calendar)."""
	return ensure_utc(instant).strftime("%Y%m%dT%H%M%SZ")


def build_google_calendar_url(
	title: str,
	start: datetime,
	end: datetime,
	description: Optional[str] = None,
	location: Optional[str] = None
) -> str:
	"""
	URL de Google Calendar "Add Event".

	Formato:
		https://calendar.google.com/calendar/render?action=TEMPLATE
		&text=Title&dates=START/END&details=Description&location=Link
	"""
	params = {
		"action": "TEMPLATE",
		"text": title,
		"dates": f"{to_gcal_date(start)}/{to_gcal_date(end)}",
		"details": description or "",
		"location": location or "",
	}
	return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"


def build_outlook_calendar_url(
	title: str,
	start: datetime,
	end: datetime,
	description: Optional[str] = None,
	location: Optional[str] = None
) -> str:
	"""URL de Outlook.com para componer el evento."""
	params = {
		"path": "/calendar/action/compose",
		"rru": "addevent",
		"subject": title,
		"startdt": ensure_utc(start).strftime("%Y-%m-%dT%H:%M:%SZ"),
		"enddt": ensure_utc(end).strftime("%Y-%m-%dT%H:%M:%SZ"),
		"body": description or "",
		"location": location or "",
	}
	return f"{OUTLOOK_CALENDAR_URL}?{urlencode(params)}"


def build_calendar_url(
	provider: str,
	title: str,
	start: datetime,
	end: datetime,
	description: Optional[str] = None,
	location: Optional[str] = None
) -> str:
	"""
	Despacha al builder del proveedor ("google" u "outlook").

	Raises:
		ValueError: si el proveedor no es soportado
	"""
	if provider == "google":
		return build_google_calendar_url(title, start, end, description, location)
	elif provider == "outlook":
		return build_outlook_calendar_url(title, start, end, description, location)
	else:
		raise ValueError(f"Unsupported calendar provider: {provider}")


def booking_invite_description(event_description: str, meeting_link: str) -> str:
	"""Descripción del evento con el link para unirse, si hay."""
	if not meeting_link:
		return event_description or ""
	return f"{event_description or ''}\n\nJoin: {meeting_link}"

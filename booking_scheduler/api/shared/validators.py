"""
Booking Argument Validators

Parse and check raw endpoint arguments. Each helper returns the parsed
value, or raises frappe.ValidationError naming the offending argument.
"""

import re
from datetime import date, datetime

import frappe
from frappe import _
from frappe.utils import cint

from booking_scheduler.booking_scheduler.scheduling.timezones import parse_date, parse_instant


_INSTANT_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})$")
_DOCNAME_RE = re.compile(r"^[\w@.+-][\w@.+ -]{0,139}$")


def _required(value, field_name: str) -> str:
    value = str(value or "").strip()
    if not value:
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)
    return value


def parse_date_arg(value, field_name: str = "date") -> date:
    """
    "YYYY-MM-DD" -> date.

    Raises:
        frappe.ValidationError
    """
    value = _required(value, field_name)
    try:
        return parse_date(value)
    except ValueError:
        frappe.throw(_("Invalid {0}. Use YYYY-MM-DD").format(field_name), frappe.ValidationError)


def parse_instant_arg(value, field_name: str = "datetime") -> datetime:
    """
    ISO-8601 instant with an explicit zone -> aware UTC datetime.

    Accepts "2026-03-02T04:00:00Z" or "2026-03-02T09:30:00+05:30"; naive
    values are rejected so the attendee's zone is never guessed.

    Raises:
        frappe.ValidationError
    """
    value = _required(value, field_name)
    if not _INSTANT_RE.match(value):
        frappe.throw(
            _("Invalid {0}. Use YYYY-MM-DDTHH:MM:SSZ").format(field_name),
            frappe.ValidationError,
        )

    try:
        return parse_instant(value)
    except ValueError:
        frappe.throw(_("Invalid {0}").format(field_name), frappe.ValidationError)


def validate_year_month(year, month) -> tuple:
    """
    Validate a calendar month.

    Returns:
        tuple: (year, month) as ints
    """
    year, month = cint(year), cint(month)

    if not 1 <= month <= 12:
        frappe.throw(_("month must be between 1 and 12"), frappe.ValidationError)

    if not 2000 <= year <= 2100:
        frappe.throw(_("year is out of range"), frappe.ValidationError)

    return year, month


def validate_docname(name, field_name: str = "name") -> str:
    """
    Document name (event type, booking id, owner email, slug).

    Only word characters and ``@ . + - space`` are allowed, up to 140 chars.
    """
    name = _required(name, field_name)
    if not _DOCNAME_RE.match(name):
        frappe.throw(_("Invalid {0}").format(field_name), frappe.ValidationError)
    return name

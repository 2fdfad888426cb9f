"""
Security Utilities for Public APIs

Guest endpoints of the booking page are protected with:
- Per-IP rate limits, one budget per action (RATE_LIMITS)
- A honeypot form field
- Text cleanup of free-form input
Owner endpoints additionally check that the caller owns the calendar.
"""

import re
import frappe
from frappe import _
from frappe.utils import cint


# action -> (requests, window in seconds)
RATE_LIMITS = {
    "read": (30, 60),
    "submit_booking": (5, 60),
    "calendar_link": (30, 60),
}

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def check_rate_limit(action: str) -> None:
    """
    Count one request for `action` from the caller's IP.

    The counter lives in Frappe's Redis cache and expires with the window.

    Raises:
        frappe.TooManyRequestsError: when the action's budget is spent
    """
    limit, seconds = RATE_LIMITS.get(action, RATE_LIMITS["read"])
    ip = get_client_ip()
    key = f"booking_scheduler:rate:{action}:{ip}"

    used = cint(frappe.cache.get_value(key))
    if used >= limit:
        frappe.log_error(
            title=_("Booking rate limit hit"),
            message=f"{action} from {ip}: {used} requests in {seconds}s (limit {limit})"
        )
        frappe.throw(
            _("Too many requests. Please wait a moment and try again."),
            frappe.TooManyRequestsError
        )

    frappe.cache.set_value(key, used + 1, expires_in_sec=seconds)


def get_client_ip() -> str:
    """Caller IP, preferring proxy headers over the socket address."""
    request = getattr(frappe, "request", None)
    if request is None:
        return "unknown"

    for header in ("X-Forwarded-For", "X-Real-IP"):
        value = request.headers.get(header, "")
        if value:
            return value.split(",")[0].strip()

    return request.remote_addr or "unknown"


def check_honeypot(honeypot_value: str = None) -> None:
    """
    Reject submissions whose hidden honeypot field was filled in.

    Raises:
        frappe.ValidationError: with a deliberately vague message
    """
    if not honeypot_value:
        return

    frappe.log_error(
        title=_("Booking honeypot triggered"),
        message=f"IP {get_client_ip()} sent honeypot={honeypot_value[:100]!r}"
    )
    frappe.throw(_("Invalid request"), frappe.ValidationError)


def clean_text(value, max_length: int = 500) -> str:
    """Strip, drop control characters and truncate. None/empty -> ""."""
    if value is None:
        return ""

    text = _CONTROL_CHARS.sub("", str(value)).strip()
    return text[:max_length]


def require_booking_owner(owner: str) -> None:
    """
    Only the calendar owner (or a System Manager) may manage its bookings.

    Raises:
        frappe.PermissionError
    """
    user = frappe.session.user
    if user == "Guest":
        frappe.throw(_("Please log in to manage bookings"), frappe.PermissionError)

    if user != owner and "System Manager" not in frappe.get_roles(user):
        frappe.throw(_("You are not allowed to manage this booking"), frappe.PermissionError)

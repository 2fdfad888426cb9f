"""
Record Permissions

Booking Event Types, Availability Rules and Bookings belong to the User in
their booking_owner field. Wired through hooks.py.
"""

from typing import Optional

import frappe


def _is_admin(user: str) -> bool:
	return user == "Administrator" or "System Manager" in frappe.get_roles(user)


def get_permission_query_conditions(user: Optional[str] = None, doctype: Optional[str] = None) -> str:
	"""Condición SQL para list views: solo los registros del owner."""
	user = user or frappe.session.user
	if _is_admin(user):
		return ""

	table = f"`tab{doctype}`" if doctype else ""
	column = f"{table}.`booking_owner`" if table else "`booking_owner`"
	return f"{column} = {frappe.db.escape(user)}"


def has_permission(doc, ptype: str = "read", user: Optional[str] = None) -> bool:
	user = user or frappe.session.user
	if _is_admin(user):
		return True
	return not doc.get("booking_owner") or doc.get("booking_owner") == user

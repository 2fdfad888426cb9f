import frappe


BOOKING_OWNER_ROLE = "Booking Owner"


def after_install():
	create_booking_owner_role()


def before_tests():
	create_booking_owner_role()


def create_booking_owner_role():
	"""Rol de los usuarios que publican Event Types y reciben bookings."""
	if frappe.db.exists("Role", BOOKING_OWNER_ROLE):
		return

	frappe.get_doc({
		"doctype": "Role",
		"role_name": BOOKING_OWNER_ROLE,
		"desk_access": 1,
	}).insert(ignore_permissions=True)
	frappe.db.commit()

# Copyright (c) 2026, Booking Scheduler Team and contributors
# For license information, please see license.txt

from frappe.model.document import Document


class BookingCustomQuestion(Document):
	pass

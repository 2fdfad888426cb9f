app_name = "booking_scheduler"
app_title = "Booking Scheduler"
app_publisher = "Booking Scheduler Team"
app_description = "Event types, weekly availability and bookable time slots for one-on-one meetings"
app_email = "dev@booking-scheduler.example"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Installation
# ------------

# before_install = "booking_scheduler.install.before_install"
after_install = "booking_scheduler.install.after_install"

# Permissions
# -----------
# Owners only see their own calendar records; System Managers see all

permission_query_conditions = {
	"Booking Event Type": "booking_scheduler.booking_scheduler.permissions.get_permission_query_conditions",
	"Availability Rule": "booking_scheduler.booking_scheduler.permissions.get_permission_query_conditions",
	"Booking": "booking_scheduler.booking_scheduler.permissions.get_permission_query_conditions",
}

has_permission = {
	"Booking Event Type": "booking_scheduler.booking_scheduler.permissions.has_permission",
	"Availability Rule": "booking_scheduler.booking_scheduler.permissions.has_permission",
	"Booking": "booking_scheduler.booking_scheduler.permissions.has_permission",
}

# Document Events
# ---------------
# Hook on document methods and events

# doc_events = {
# 	"*": {
# 		"on_update": "method",
# 		"on_cancel": "method",
# 		"on_trash": "method"
# 	}
# }

# Scheduled Tasks
# ---------------
# Ninguno: los slots se calculan al vuelo y los bookings no expiran

# Testing
# -------

before_tests = "booking_scheduler.install.before_tests"

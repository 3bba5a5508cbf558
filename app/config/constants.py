"""
Application Constants

Slot hours, capacities, window widths and other magic numbers used across
the booking and matching services.
"""

# ============================================================================
# Slot Calendar
# ============================================================================

WEEKEND_DAYS = ("friday", "saturday", "sunday")

# Local start time (hour, minute) of the slot for each weekend day
SLOT_START_TIMES = {
    "friday": (19, 0),
    "saturday": (19, 0),
    "sunday": (12, 0),
}

# ============================================================================
# Events
# ============================================================================

DEFAULT_SLOT_CAPACITY = 24

# Open/full slots older than this are closed by the scheduler
SLOT_CLOSE_AFTER_HOURS = 24

DEFAULT_EVENTS_LIMIT = 20
MAX_EVENTS_LIMIT = 100

# ============================================================================
# Bookings
# ============================================================================

# Active booking lookup reaches this many days either side of "now",
# so last weekend's booking is still visible on Monday
BOOKING_SEARCH_WINDOW_DAYS = 7

# ============================================================================
# Groups
# ============================================================================

GROUP_NAME_SEPARATOR = " · "

# ============================================================================
# Compatibility
# ============================================================================

MAX_SHARED_INTERESTS = 5
UNKNOWN_CITY = "Unknown"
VARIOUS_SPECIALTIES = "Various"
GENERAL_SPECIALTY_CLUSTER = "General"
SPECIALTY_MAJORITY_SHARE = 0.6

SPECIALTY_CLUSTERS = (
    ("Primary Care", ("Family Medicine", "General Practice", "Internal Medicine")),
    ("Surgical", ("Surgery", "Orthopedics", "Plastic Surgery", "Neurosurgery")),
    ("Medical", ("Cardiology", "Pulmonology", "Gastroenterology", "Nephrology", "Endocrinology")),
)

AVAILABILITY_SLOT_LABELS = {
    "fri_evening": "Fri Evening",
    "sat_morning": "Sat Morning",
    "sat_afternoon": "Sat Afternoon",
    "sat_evening": "Sat Evening",
    "sun_morning": "Sun Morning",
    "sun_afternoon": "Sun Afternoon",
    "sun_evening": "Sun Evening",
    "weekday_eve": "Weekday Evenings",
}

# ============================================================================
# Reminders
# ============================================================================

REMINDER_DAY_OF_WEEK = "fri"
REMINDER_HOUR_UTC = 9
CLOSE_SLOTS_INTERVAL_MINUTES = 60
NOTIFY_TIMEOUT_SECONDS = 10
REMINDER_TITLE = "Your meetup is this weekend!"

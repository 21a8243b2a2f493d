"""Application-wide constants for RoomBook."""

from __future__ import annotations

BRAND_NAME = "RoomBook"

# API metadata
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Hourly room and section bookings with conflict-checked commits"
API_VERSION = "1.0.0"

# Reservation unit
SLOT_DURATION_HOURS = 1
HOURS_PER_DAY = 24

# Booking session defaults (overridable through settings)
DEFAULT_OPERATING_TIMEZONE = "America/Toronto"
DEFAULT_SESSION_TIMEOUT_SECONDS = 600  # 10 minutes of inactivity
DEFAULT_SESSION_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_DATE_WINDOW_DAYS = 14  # today + 13 days forward

# Day of week mapping (index matches date.weekday())
DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# User-facing copy
INVALID_ROOM_MESSAGE = "Invalid Room: Do `/rooms` to see all available rooms!"
INVALID_SECTION_MESSAGE = "Invalid Section: Do `/rooms` to see all available rooms and sections!"
NO_SLOTS_PLACEHOLDER = "No currently available timeblocks on selected date"
SLOT_PLACEHOLDER = "Select a Time to Book!"
DATE_PLACEHOLDER = "Select Date of Room Booking"
CONFLICT_MESSAGE = (
    "This timeblock was booked while you were browsing. Please select a different time."
)
NOT_SESSION_OWNER_MESSAGE = "This booking session isn't for you!"
STORE_UNAVAILABLE_MESSAGE = "Booking service temporarily unavailable. Please retry."

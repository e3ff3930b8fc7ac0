"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

GUEST_RECORD_LIMIT = 2

DEFAULT_OFFICE_LATITUDE = 41.311081
DEFAULT_OFFICE_LONGITUDE = 69.240562
DEFAULT_OFFICE_RADIUS_M = 200.0

# Mean Earth radius (IUGG), meters.
EARTH_RADIUS_M = 6_371_008.8

WEEKLY_WINDOW_DAYS = 7
DEFAULT_HISTORY_DAYS = 30

CHECK_IN_REASON = "Authenticate to Check In"
CHECK_OUT_REASON = "Authenticate to Check Out"

GUEST_DISPLAY_NAME = "Guest"

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
The late cutoff and half-day threshold are fixed business rules.
"""

from datetime import time

LATE_CUTOFF = time(9, 30)
HALF_DAY_HOURS = 4

DEFAULT_LOCATION = "Office"
REMARKS_MAX_LENGTH = 200

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
OWN_RECORDS_PAGE_SIZE = 30
TOP_PERFORMERS_LIMIT = 5

DEFAULT_TIMEZONE = "UTC"

ADMIN_GROUP = "admin_room"
SUBJECT_GROUP_PREFIX = "employee_"
ATTENDANCE_UPDATE_EVENT = "attendance_update"

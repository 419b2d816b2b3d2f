"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Legacy markers that stand for a staff attendance row.
STAFF_COURSE_SENTINEL = "STAFF"
NO_STUDENT_SENTINEL = "N/A"

FEE_RECEIPT_PREFIX = "REC"
SALARY_RECEIPT_PREFIX = "SAL"

DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5

PERIOD_FORMAT = "%Y-%m"
DATE_FORMAT = "%Y-%m-%d"

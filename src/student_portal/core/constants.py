"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7

# Marks scheme: two internals out of 25 and one external out of 75.
MAX_INTERNAL_MARKS = 25
MAX_EXTERNAL_MARKS = 75
MAX_TOTAL_MARKS = MAX_INTERNAL_MARKS * 2 + MAX_EXTERNAL_MARKS
MAX_GRADE_POINT = 10

LOW_ATTENDANCE_THRESHOLD = 75.0

MIN_SEMESTER = 1
MAX_SEMESTER = 10
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72

DEFAULT_SUBJECTS = (
    "Discrete Mathematics",
    "Coding Skills",
    "C++ Programming",
)

SESSION_USER_KEY = "current_user"

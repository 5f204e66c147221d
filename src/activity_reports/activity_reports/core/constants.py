"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
RECENT_REPORTS_LIMIT = 10

TITLE_MAX_LENGTH = 200
LOCATION_MAX_LENGTH = 200
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100
FULL_NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
FILENAME_MAX_LENGTH = 255
MIME_TYPE_MAX_LENGTH = 100

REVIEW_INVALID_STATE_MESSAGE = "only submitted reports can be reviewed"

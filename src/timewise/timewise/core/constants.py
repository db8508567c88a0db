"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_EVENTS_COLLECTION = "events"
DEFAULT_LISTING_CACHE_TTL_SECONDS = 60
DEFAULT_NOTIFY_WORKERS = 2

# Additional text is appended to a suggested title only when it is this short.
TITLE_SUFFIX_MAX_LENGTH = 30

MAILING_LIST_ID_PREFIX = "ml_"
MAILING_LIST_ID_SUFFIX_LENGTH = 5

MSG_CREATED = "Event created successfully!"
MSG_UPDATED = "Event updated successfully!"
MSG_DELETED = "Event deleted successfully!"
MSG_VALIDATION_FAILED = "Validation failed"
MSG_NOT_FOUND = "Event not found or you are not allowed to change it."
MSG_NOT_AUTHORIZED = "You are not allowed to act on behalf of another user."
MSG_CREATE_FAILED = "Failed to create event. Please try again."
MSG_UPDATE_FAILED = "Failed to update event. Please try again."
MSG_DELETE_FAILED = "Failed to delete event. Please try again."
MSG_LIST_ADDED = "Mailing list added."

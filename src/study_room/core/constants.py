"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 200
DEFAULT_ADMIN_LIST_LIMIT = 500
DEFAULT_ACCESS_TOKEN_DAYS = 7
BEARER_PREFIX = "Bearer "

"""Constants for the ODPT API adapter.

API Documentation: https://developer.odpt.org/documents
Every request needs a consumer key passed as the acl:consumerKey query parameter.
"""

ODPT_BASE_URL = "https://api.odpt.org/api/v4"
DEFAULT_OPERATOR = "odpt.Operator:Toei"

# Resources
RESOURCE_STOP_POLE = "odpt:BusstopPole"
RESOURCE_ROUTE_PATTERN = "odpt:BusroutePattern"
RESOURCE_TIMETABLE = "odpt:BusTimetable"
RESOURCE_BUS = "odpt:Bus"

# Query parameters
PARAM_CONSUMER_KEY = "acl:consumerKey"
PARAM_TOP = "$top"
PARAM_SKIP = "$skip"
PARAM_OPERATOR = "odpt:operator"
PARAM_TITLE = "dc:title"
PARAM_PATTERN = "odpt:busroutePattern"
PARAM_ROUTE = "odpt:busroute"

DEFAULT_PAGE_SIZE = 1000

# Retry policy for HTTP 429: wait base + attempt * increment before each retry
DEFAULT_MAX_RETRIES = 4
DEFAULT_RETRY_BASE_DELAY_MS = 800
DEFAULT_RETRY_INCREMENT_MS = 400

ERROR_BODY_PREVIEW_CHARS = 200

DEFAULT_HEADERS = {
    "Accept": "application/json",
}

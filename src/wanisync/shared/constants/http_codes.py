"""HTTP Status Code Constants.

This module contains HTTP status code and header name constants used
when talking to the WaniKani API.
"""


class HTTPStatusCodes:
    """HTTP status code constants."""

    OK = 200
    NOT_MODIFIED = 304
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500

    @staticmethod
    def is_success(code: int) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= code < 300


class HTTPHeaders:
    """HTTP header names."""

    AUTHORIZATION = "Authorization"
    IF_MODIFIED_SINCE = "If-Modified-Since"
    USER_AGENT = "User-Agent"
    RATE_LIMIT_REMAINING = "RateLimit-Remaining"
    WANIKANI_REVISION = "Wanikani-Revision"

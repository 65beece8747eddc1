"""
WaniKani API Constants

Endpoints, query parameter names and rate limit defaults for the
WaniKani v2 API.
"""

BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND


class WaniKaniAPI:
    """WaniKani v2 API constants."""

    BASE_URL = "https://api.wanikani.com/v2/"
    REVISION = "20170710"
    USER_AGENT = "WaniSync/0.1.0"

    # Documented limit: 60 requests per minute
    RATE_LIMIT_REQUESTS = 60
    RATE_LIMIT_WINDOW = 1 * BASE_MINUTE

    DEFAULT_TIMEOUT = 30 * BASE_SECOND


class Endpoints:
    """Collection endpoint paths relative to the base URL."""

    ASSIGNMENTS = "assignments"
    REVIEW_STATISTICS = "review_statistics"
    SUBJECTS = "subjects"


class QueryParams:
    """Query parameter names."""

    UPDATED_AFTER = "updated_after"
    SUBJECT_IDS = "subject_ids"
    IDS = "ids"


class ResourceFields:
    """Field names of Resource and Collection payloads."""

    ID = "id"
    OBJECT = "object"
    DATA = "data"
    DATA_UPDATED_AT = "data_updated_at"
    PAGES = "pages"
    NEXT_URL = "next_url"
    SUBJECT_ID = "subject_id"
    OBJECT_COLLECTION = "collection"

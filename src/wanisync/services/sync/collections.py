"""Registry of the WaniKani collections WaniSync keeps in sync.

A CollectionSpec names the cache keys of a collection, its endpoint, how
its records are keyed and which query parameter scopes a request to an
id allow-list.
"""

from __future__ import annotations

from dataclasses import dataclass

from wanisync.services.wanikani.models import Resource
from wanisync.shared.constants import CacheKeys, Endpoints, QueryParams
from wanisync.shared.errors import DomainError, ErrorCode, ErrorContext


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one synchronized collection.

    Attributes:
        name: Cache key of the merged collection
        path: Endpoint path relative to the API base URL
        key_field: Payload field that identifies a record; None means the
            resource ``id``
        id_filter_param: Query parameter restricting a request to ids
        resource_prefix: Prefix of single-resource cache keys
            (``subject`` gives ``subject-440``)
    """

    name: str
    path: str
    key_field: str | None = None
    id_filter_param: str | None = None
    resource_prefix: str | None = None

    @property
    def watermark_key(self) -> str:
        return f"{self.name}{CacheKeys.WATERMARK_SUFFIX}"

    def resource_key(self, resource_id: int) -> str:
        """Cache key of a single resource of this collection."""
        if self.resource_prefix is None:
            raise DomainError(
                code=ErrorCode.UNKNOWN_COLLECTION,
                message=f"Collection '{self.name}' has no single-resource cache",
                context=ErrorContext(operation="resource_key", collection=self.name),
            )
        return f"{self.resource_prefix}{CacheKeys.RESOURCE_SEPARATOR}{resource_id}"

    def key_for(self, resource: Resource) -> int:
        """Return the merge key of ``resource``.

        Raises:
            DomainError: If the resource lacks its key
        """
        if self.key_field is None:
            key = resource.id
        else:
            key = resource.data.get(self.key_field)

        if not isinstance(key, int) or isinstance(key, bool):
            raise DomainError(
                code=ErrorCode.VALIDATION_ERROR,
                message=(
                    f"Record of '{self.name}' has no integer "
                    f"'{self.key_field or 'id'}' key: {resource.url}"
                ),
                context=ErrorContext(operation="key_for", collection=self.name),
            )
        return key


REVIEW_STATISTICS = CollectionSpec(
    name="review_statistics",
    path=Endpoints.REVIEW_STATISTICS,
)

# Assignments are looked up by subject, so they are keyed by subject_id
ASSIGNMENTS = CollectionSpec(
    name="assignments",
    path=Endpoints.ASSIGNMENTS,
    key_field="subject_id",
    id_filter_param=QueryParams.SUBJECT_IDS,
)

SUBJECTS = CollectionSpec(
    name="subjects",
    path=Endpoints.SUBJECTS,
    id_filter_param=QueryParams.IDS,
    resource_prefix="subject",
)

COLLECTIONS: dict[str, CollectionSpec] = {
    spec.name: spec for spec in (REVIEW_STATISTICS, ASSIGNMENTS, SUBJECTS)
}


def get_collection(collection: str | CollectionSpec) -> CollectionSpec:
    """Resolve a collection name to its spec.

    Raises:
        DomainError: If the name is not registered
    """
    if isinstance(collection, CollectionSpec):
        return collection
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise DomainError(
            code=ErrorCode.UNKNOWN_COLLECTION,
            message=(
                f"Unknown collection '{collection}'. "
                f"Known collections: {', '.join(sorted(COLLECTIONS))}"
            ),
            context=ErrorContext(operation="get_collection", collection=str(collection)),
        ) from None

"""Paginated fetching of WaniKani collections.

A collection refresh is a lazy sequence of pages: the first page is
requested (optionally conditionally), then each page's ``next_url`` is
followed verbatim and unconditionally until a page has no next link.
Nothing partial is ever returned; any failure mid-sequence propagates.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import ValidationError

from wanisync.services.wanikani.client import WaniKaniClient
from wanisync.services.wanikani.models import Collection, Resource
from wanisync.shared.constants import ResourceFields
from wanisync.shared.errors import ErrorCode, create_api_error
from wanisync.shared.logging import log_operation_start, log_operation_success

logger = logging.getLogger(__name__)


class Unchanged(Enum):
    """Sentinel returned when the server answered "not modified"."""

    UNCHANGED = "unchanged"


UNCHANGED = Unchanged.UNCHANGED


@dataclass(frozen=True)
class PageRequest:
    """Descriptor of the first page of a collection refresh.

    Attributes:
        path: Endpoint path relative to the API base URL
        params: Query parameters of the first page
        if_modified_since: Freshness marker; makes the first request conditional
    """

    path: str
    params: dict[str, str] = field(default_factory=dict)
    if_modified_since: str | None = None


@dataclass(frozen=True)
class FetchResult:
    """Every resource of one complete refresh.

    Attributes:
        resources: Resources of all pages, in page order
        data_updated_at: Freshness timestamp reported on the first page
        page_count: Number of pages requested
    """

    resources: list[Resource]
    data_updated_at: str | None
    page_count: int


FetchOutcome = Union[FetchResult, Unchanged]


class PaginatedFetcher:
    """Fetches whole collections by following ``pages.next_url``.

    Args:
        client: Rate-limited API client
    """

    def __init__(self, client: WaniKaniClient) -> None:
        self.client = client

    def iter_pages(
        self,
        request: PageRequest,
        cancel_event: threading.Event | None = None,
    ) -> Iterator[Collection]:
        """Yield the pages of one refresh lazily.

        Yields nothing at all when the conditional first request was
        answered with 304; an empty but valid collection still yields one
        page.

        Raises:
            WaniKaniAPIError: On transport failure, bad status, malformed
                page, a 304 on a follow-up page, or a pagination loop
            OperationCancelledError: If ``cancel_event`` fires
        """
        body = self.client.get(
            request.path,
            request.params,
            if_modified_since=request.if_modified_since,
            cancel_event=cancel_event,
        )
        if body is None:
            return

        url = self.client.build_url(request.path)
        page = self._parse_page(body, url)
        yield page

        seen_urls = {url}
        while page.pages.next_url:
            next_url = page.pages.next_url
            if next_url in seen_urls:
                raise create_api_error(
                    f"Pagination loop detected at {next_url}",
                    endpoint=next_url,
                    operation="iter_pages",
                    code=ErrorCode.API_INVALID_RESPONSE,
                )
            seen_urls.add(next_url)

            body = self.client.get(next_url, cancel_event=cancel_event)
            if body is None:
                raise create_api_error(
                    f"Unconditional page request answered 304: {next_url}",
                    endpoint=next_url,
                    operation="iter_pages",
                    code=ErrorCode.API_INVALID_RESPONSE,
                )
            page = self._parse_page(body, next_url)
            yield page

    def fetch_all(
        self,
        request: PageRequest,
        cancel_event: threading.Event | None = None,
    ) -> FetchOutcome:
        """Fetch every page of a collection refresh.

        Args:
            request: First page descriptor
            cancel_event: Optional event aborting the refresh between requests

        Returns:
            ``UNCHANGED`` if the server reported no modification, otherwise a
            FetchResult holding all resources and the first page's
            ``data_updated_at``
        """
        log_operation_start(
            logger,
            "fetch_all",
            {"path": request.path, "conditional": request.if_modified_since is not None},
        )
        start = time.perf_counter()

        resources: list[Resource] = []
        data_updated_at: str | None = None
        page_count = 0
        for page in self.iter_pages(request, cancel_event):
            if page_count == 0:
                data_updated_at = page.data_updated_at
            page_count += 1
            resources.extend(page.data)

        duration_ms = (time.perf_counter() - start) * 1000
        if page_count == 0:
            logger.debug("Collection %s unchanged since %s", request.path, request.if_modified_since)
            return UNCHANGED

        log_operation_success(
            logger,
            "fetch_all",
            duration_ms,
            result_info={"pages": page_count, "resources": len(resources)},
            context={"path": request.path},
        )
        return FetchResult(
            resources=resources,
            data_updated_at=data_updated_at,
            page_count=page_count,
        )

    def fetch_resource(
        self,
        path: str,
        cancel_event: threading.Event | None = None,
    ) -> Resource:
        """Fetch a single resource such as ``subjects/440``.

        Raises:
            WaniKaniAPIError: On failure or if the body is not a resource
        """
        body = self.client.get(path, cancel_event=cancel_event)
        url = self.client.build_url(path)
        if body is None:
            raise create_api_error(
                f"Unconditional resource request answered 304: {url}",
                endpoint=url,
                operation="fetch_resource",
                code=ErrorCode.API_INVALID_RESPONSE,
            )
        try:
            return Resource.model_validate(body)
        except ValidationError as e:
            raise create_api_error(
                f"Malformed resource returned by {url}",
                endpoint=url,
                operation="fetch_resource",
                original_error=e,
                code=ErrorCode.API_INVALID_RESPONSE,
            ) from e

    @staticmethod
    def _parse_page(body: dict[str, Any], url: str) -> Collection:
        if body.get(ResourceFields.OBJECT) != ResourceFields.OBJECT_COLLECTION:
            raise create_api_error(
                f"Expected a collection from {url}, got {body.get(ResourceFields.OBJECT)!r}",
                endpoint=url,
                operation="parse_page",
                code=ErrorCode.API_INVALID_RESPONSE,
            )
        try:
            return Collection.model_validate(body)
        except ValidationError as e:
            raise create_api_error(
                f"Malformed collection page returned by {url}",
                endpoint=url,
                operation="parse_page",
                original_error=e,
                code=ErrorCode.API_INVALID_RESPONSE,
            ) from e

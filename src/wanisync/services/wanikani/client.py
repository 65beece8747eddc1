"""WaniKani API client with rate limiting and error handling.

This module issues single GET requests against the WaniKani v2 API.
Every request first passes through the shared rate limiter; a
``304 Not Modified`` answer to a conditional request is reported as
``None`` so callers can tell "unchanged" apart from an empty page.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import requests

from wanisync.services.rate_limiter import SlidingWindowRateLimiter
from wanisync.shared.constants import HTTPHeaders, HTTPStatusCodes, WaniKaniAPI
from wanisync.shared.errors import ErrorCode, create_api_error
from wanisync.shared.logging import log_api_call

logger = logging.getLogger(__name__)


class WaniKaniClient:
    """Low-level WaniKani API client.

    Args:
        token: Bearer token
        rate_limiter: Limiter shared by every request of this process
        base_url: API base URL; relative paths are joined onto it
        revision: Value of the ``Wanikani-Revision`` header
        timeout: Request timeout in seconds
        session: Optional ``requests.Session`` (injected in tests)
    """

    def __init__(
        self,
        token: str,
        rate_limiter: SlidingWindowRateLimiter,
        *,
        base_url: str = WaniKaniAPI.BASE_URL,
        revision: str = WaniKaniAPI.REVISION,
        timeout: float = WaniKaniAPI.DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self._headers = {
            HTTPHeaders.AUTHORIZATION: f"Bearer {token}",
            HTTPHeaders.WANIKANI_REVISION: revision,
            HTTPHeaders.USER_AGENT: WaniKaniAPI.USER_AGENT,
        }

    def build_url(self, path: str) -> str:
        """Resolve ``path`` against the base URL.

        Absolute URLs (such as a collection's ``next_url``) are returned
        verbatim.
        """
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path.lstrip('/')}"

    def get(
        self,
        path: str,
        params: dict[str, str] | None = None,
        *,
        if_modified_since: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any] | None:
        """Perform one rate-limited GET request.

        Args:
            path: Endpoint path relative to the base URL, or an absolute URL
            params: Query parameters
            if_modified_since: Freshness marker sent as ``If-Modified-Since``
            cancel_event: Aborts the wait for a rate limit slot when set

        Returns:
            Decoded JSON body, or None when the server answered 304

        Raises:
            WaniKaniAPIError: On transport failure, a non-2xx status other
                than 304, or a body that is not a JSON object
            OperationCancelledError: If ``cancel_event`` fires while waiting
        """
        url = self.build_url(path)
        headers = dict(self._headers)
        if if_modified_since is not None:
            headers[HTTPHeaders.IF_MODIFIED_SINCE] = if_modified_since

        self.rate_limiter.acquire(cancel_event)

        start = time.perf_counter()
        try:
            response = self.session.get(
                url,
                params=params or None,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise create_api_error(
                f"Request to {url} timed out",
                endpoint=url,
                operation="wanikani_get",
                original_error=e,
                code=ErrorCode.API_TIMEOUT,
            ) from e
        except requests.exceptions.RequestException as e:
            raise create_api_error(
                f"Network error while requesting {url}: {e}",
                endpoint=url,
                operation="wanikani_get",
                original_error=e,
            ) from e

        duration_ms = (time.perf_counter() - start) * 1000
        log_api_call(
            logger,
            endpoint=url,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            context={"conditional": if_modified_since is not None},
        )
        self._reconcile_budget(response)

        if response.status_code == HTTPStatusCodes.NOT_MODIFIED:
            return None

        if not HTTPStatusCodes.is_success(response.status_code):
            raise create_api_error(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
                endpoint=url,
                operation="wanikani_get",
            )

        try:
            body = response.json()
        except ValueError as e:
            raise create_api_error(
                f"Response from {url} is not valid JSON",
                status_code=response.status_code,
                endpoint=url,
                operation="wanikani_get",
                original_error=e,
                code=ErrorCode.API_INVALID_RESPONSE,
            ) from e

        if not isinstance(body, dict):
            raise create_api_error(
                f"Response from {url} is not a JSON object",
                status_code=response.status_code,
                endpoint=url,
                operation="wanikani_get",
                code=ErrorCode.API_INVALID_RESPONSE,
            )

        return body

    def _reconcile_budget(self, response: requests.Response) -> None:
        remaining = response.headers.get(HTTPHeaders.RATE_LIMIT_REMAINING)
        if remaining is None:
            return
        try:
            self.rate_limiter.reconcile(int(remaining))
        except (TypeError, ValueError):
            logger.debug("Ignoring malformed %s header: %r", HTTPHeaders.RATE_LIMIT_REMAINING, remaining)

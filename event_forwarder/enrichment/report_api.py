"""
Report API client.

Looks up threat report metadata (title, score, link) on the server's
REST API for feed hits. Requests are authenticated with the server API
token and retried with exponential backoff on transport errors.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from event_forwarder.errors import ReportLookupError
from event_forwarder.schemas.message import ReportInfo

logger = logging.getLogger(__name__)

REPORT_PATH = "/api/v1/feed/{feed_id}/report/{report_id}"


@dataclass
class ReportAPIConfig:
    """Connection settings for the report API."""

    base_url: str
    api_token: str = ""
    ssl_verify: bool = True
    request_timeout: float = 10.0
    max_retries: int = 3
    cache_size: int = 1024


class ReportAPIClient:
    """
    Client for the feed report lookup endpoint.

    Safe to share between worker threads: the underlying ``httpx.Client``
    is thread-safe, and its lazy creation and the lookup cache are guarded
    by a lock.
    """

    def __init__(self, config: ReportAPIConfig, client: httpx.Client | None = None):
        """
        Initialize the client.

        Args:
            config: ReportAPIConfig with server URL and credentials
            client: Optional pre-built httpx client (tests inject one with
                a mock transport)
        """
        if not config.base_url:
            raise ValueError("Report API client requires base_url")
        self.config = config
        self._client = client
        self._cache: OrderedDict[tuple[int, str], ReportInfo] = OrderedDict()
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._lock:
            if self._client is None:
                headers = {"Accept": "application/json"}
                if self.config.api_token:
                    headers["X-Auth-Token"] = self.config.api_token
                self._client = httpx.Client(
                    base_url=self.config.base_url.rstrip("/"),
                    headers=headers,
                    verify=self.config.ssl_verify,
                    timeout=self.config.request_timeout,
                )
            return self._client

    def get_report(self, feed_id: int, report_id: str) -> ReportInfo:
        """
        Fetch the title, score and link of a feed report.

        Raises:
            ReportLookupError: the request failed after all retries or the
                response could not be parsed.
        """
        key = (feed_id, report_id)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached

        payload = self._make_request(REPORT_PATH.format(feed_id=feed_id, report_id=report_id))
        try:
            report = ReportInfo.model_validate(payload)
        except ValidationError as e:
            raise ReportLookupError(
                f"Unexpected report payload for feed {feed_id} report {report_id}: {e}"
            ) from e

        with self._lock:
            self._cache[key] = report
            while len(self._cache) > self.config.cache_size:
                self._cache.popitem(last=False)
        return report

    def _make_request(self, path: str, retry_count: int = 0) -> dict:
        """Make a GET request with retry logic."""
        try:
            response = self._get_client().get(path)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            # the server answered; retrying will not change a 4xx
            if e.response.status_code < 500 or retry_count >= self.config.max_retries:
                raise ReportLookupError(f"Report request {path} failed: {e}") from e
            return self._retry(path, retry_count, e)
        except httpx.TransportError as e:
            if retry_count >= self.config.max_retries:
                raise ReportLookupError(
                    f"Report request {path} failed after {retry_count} retries: {e}"
                ) from e
            return self._retry(path, retry_count, e)
        except ValueError as e:
            raise ReportLookupError(f"Report response for {path} is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ReportLookupError(f"Report response for {path} is not an object")
        return payload

    def _retry(self, path: str, retry_count: int, error: Exception) -> dict:
        wait_time = 2**retry_count
        logger.warning(f"Report request failed, retrying in {wait_time}s: {error}")
        time.sleep(wait_time)
        return self._make_request(path, retry_count + 1)

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

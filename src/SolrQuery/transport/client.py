"""Solr HTTP client.

Sends rendered queries to a Solr request handler over HTTP, with
retry/backoff on transient failures. The decoded JSON body is returned as-is.
"""

from __future__ import annotations

import random
import time
from typing import TYPE_CHECKING, Any, Mapping, Optional

import requests

from SolrQuery.core.nodes import ExpressionNode
from SolrQuery.core.render import RenderedQuery, render
from SolrQuery.transport.url import endpoint_url
from SolrQuery.utils.log import log

if TYPE_CHECKING:
    from SolrQuery.config.solr import SolrConfig

DEFAULT_TIMEOUT = 30.0
MAX_ATTEMPTS = 4
BASE_PAUSE = 0.5
MAX_SLEEP = 10.0
TOO_MANY_REQUESTS_BASE_PAUSE = 2.0
TOO_MANY_REQUESTS_MAX_SLEEP = 60.0

RETRYABLE_STATUS = {429, 500, 502, 503, 504}

HEADERS = {
    "User-Agent": "solrquery/0.1",
    "Accept": "application/json",
}


class SolrClient:
    """Low-level HTTP client for one Solr collection.

    Only builds the request and returns the raw response body; what to do
    with the documents is up to the caller.
    """

    def __init__(
        self,
        base_url: str,
        collection: str,
        *,
        handler: str = "select",
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        auth_token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            base_url: Solr base URL, e.g. ``http://localhost:8983/solr``.
            collection: Collection (or core) name.
            handler: Request handler path under the collection.
            timeout: Request timeout in seconds.
            max_attempts: Attempts per request, including the first one.
            auth_token: Optional bearer token sent as ``Authorization``.
            session: Optional pre-built session (mainly for tests).
        """
        self.url = endpoint_url(base_url, collection, handler)
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._headers = dict(HEADERS)
        if auth_token:
            self._headers["Authorization"] = f"Bearer {auth_token}"
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: SolrConfig) -> SolrClient:
        """Build a client from the ``solr`` config section."""
        return cls(
            config.base_url,
            config.collection,
            handler=config.handler,
            timeout=config.timeout,
            max_attempts=config.max_attempts,
            auth_token=config.auth_token or None,
        )

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections."""
        self._session.close()

    def __enter__(self) -> SolrClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def select(
        self,
        query: ExpressionNode | RenderedQuery,
        *,
        rows: int = 10,
        start: int = 0,
        extra_params: Mapping[str, str] | None = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Run a query and return the decoded JSON response.

        Args:
            query: Expression tree, or an already rendered query.
            rows: Number of documents to return.
            start: Offset of the first document.
            extra_params: Additional request params (``fl``, ``fq``, ...).
                They may not override ``q`` or the placeholder params.
            timeout: Optional per-call timeout in seconds.

        Returns:
            Decoded JSON body.

        Raises:
            ValueError: If `extra_params` collides with rendered params.
            requests.RequestException: The last request error after retries.
        """
        rendered = query if isinstance(query, RenderedQuery) else render(query)
        params = self.build_params(rendered, rows=rows, start=start, extra_params=extra_params)

        log.debug("Solr select: url=%s rows=%s start=%s", self.url, rows, start)
        resp = self._get_with_retry(params=params, timeout=timeout)
        resp.raise_for_status()
        log.debug("Solr response ok: status=%s bytes=%s", resp.status_code, len(resp.content))
        return resp.json()

    @staticmethod
    def build_params(
        rendered: RenderedQuery,
        *,
        rows: int,
        start: int,
        extra_params: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Merge rendered params with paging and response-format params."""
        params: dict[str, str] = dict(rendered.parameters)
        clashes = sorted(set(extra_params or {}) & set(params))
        if clashes:
            raise ValueError(f"extra_params would override rendered params: {clashes}")
        params.update(extra_params or {})
        params.setdefault("wt", "json")
        params["rows"] = str(rows)
        params["start"] = str(start)
        return params

    def _get_with_retry(
        self,
        *,
        params: dict[str, str],
        timeout: Optional[float],
    ) -> requests.Response:
        """Issue GET request with retry/backoff.

        Retries on timeouts/connection errors and selected HTTP status codes.

        Raises:
            requests.RequestException: Last observed error when all attempts failed.
        """
        timeout = timeout or self.timeout
        last_err: requests.RequestException | None = None

        for attempt in range(1, self.max_attempts + 1):
            last_status_code: int | None = None
            try:
                log.debug("Solr request attempt %d/%d to %s", attempt, self.max_attempts, self.url)
                resp = self._session.get(self.url, params=params, headers=self._headers, timeout=timeout)
                if resp.status_code in RETRYABLE_STATUS:
                    raise requests.exceptions.HTTPError(f"HTTP {resp.status_code}", response=resp)
                return resp
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                last_err = e
            except requests.exceptions.HTTPError as e:
                last_err = e
                st = getattr(e.response, "status_code", None)
                last_status_code = st if isinstance(st, int) else None

            if attempt < self.max_attempts:
                log.debug("Solr retrying after attempt %d (error=%s)", attempt, last_err)
                self._sleep_backoff(attempt, status_code=last_status_code)

        assert last_err is not None
        raise last_err

    @staticmethod
    def _sleep_backoff(attempt: int, *, status_code: int | None = None) -> None:
        """Sleep with status-aware exponential backoff.

        Args:
            attempt: Current attempt index (1-based).
            status_code: Last HTTP status code when available.
        """
        if status_code == 429:
            delay = min(TOO_MANY_REQUESTS_BASE_PAUSE * (2 ** (attempt - 1)), TOO_MANY_REQUESTS_MAX_SLEEP)
        else:
            delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.25), MAX_SLEEP)
        time.sleep(delay)

"""HTTP utilities for talking to the USA Spending API.

Provides reusable pieces for:
- Connection pooling and session management
- JSON POST requests with a uniform upstream error type

Requests are made exactly once: failures are reported to the caller, never
retried.
"""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class UpstreamError(Exception):
    """A POST to the upstream API failed.

    Attributes:
        status_code: Upstream HTTP status, or None when no response arrived
                     (connection refused, timeout, DNS failure, ...).
        body: Decoded JSON error body when the upstream sent one, the raw
              text when it was not JSON, or None.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def detail(self) -> Optional[str]:
        """Return the ``detail`` string from a JSON error body, if present."""
        if isinstance(self.body, dict):
            detail = self.body.get("detail")
            if detail:
                return str(detail)
        return None


class SessionManager:
    """Manages a pooled HTTP session without automatic retries."""

    def __init__(self, pool_connections: int = 10, pool_maxsize: int = 20):
        """Initialize session manager.

        Args:
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum number of connections per pool
        """
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the pooled HTTP session.

        Returns:
            requests.Session object
        """
        if self._session is None:
            self._session = requests.Session()
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize,
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _error_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text or None


def post_json(url: str, payload: Any, session: Optional[requests.Session] = None,
              timeout: float = 30) -> Any:
    """POST *payload* as JSON to *url* and return the decoded JSON response.

    Args:
        url: Endpoint to post to
        payload: JSON-serialisable request body, sent verbatim
        session: Optional requests.Session (default: a one-off session)
        timeout: Request timeout in seconds

    Returns:
        The decoded JSON body of a 2xx response.

    Raises:
        UpstreamError: On a non-2xx status (status_code set) or when no
                       usable response was received (status_code None).
    """
    if session is None:
        session = requests.Session()

    try:
        resp = session.post(url, json=payload, headers=JSON_HEADERS, timeout=timeout)
    except requests.RequestException as e:
        raise UpstreamError(f"Request to {url} failed: {e}") from e

    if not resp.ok:
        raise UpstreamError(
            f"Upstream returned HTTP {resp.status_code} for {url}",
            status_code=resp.status_code,
            body=_error_body(resp),
        )

    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(
            f"Upstream returned a non-JSON body for {url}",
            status_code=resp.status_code,
            body=resp.text or None,
        ) from e

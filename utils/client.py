"""
Award count and search client.

Runs the fetch cycle behind the search page: build filters from the form,
fetch the total record count, then fetch one page of results.  The count
is best-effort (any failure reads as 0); a failed search is reported to the
caller as a SearchError carrying a user-visible message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from utils.config import FIXED_FIELDS, PAGE_LIMIT
from utils.filters import FormState, build_filters
from utils.http import UpstreamError, post_json
from utils.pagination import PaginationState

logger = logging.getLogger(__name__)

GENERIC_SEARCH_ERROR = "An error occurred with the Spending By Award API."


class SearchError(Exception):
    """A results page could not be fetched."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def build_page_request(filters: dict[str, Any], page: int,
                       limit: int = PAGE_LIMIT) -> dict[str, Any]:
    """Request body for one page of ``spending_by_award`` results."""
    return {
        "filters": filters,
        "fields": list(FIXED_FIELDS),
        "limit": limit,
        "page": page,
    }


def sum_counts(payload: Any) -> int:
    """Total of every bucket in a ``spending_by_award_count`` response."""
    results = payload["results"]
    return sum(int(v) for v in results.values() if v is not None)


@dataclass
class SearchOutcome:
    """Everything one fetch cycle produced.

    ``stale`` is set when a newer cycle started before this one finished;
    such an outcome must not be shown.
    """

    ticket: int
    page: int
    filters: dict[str, Any]
    total_count: int = 0
    api_result: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.api_result is not None


class AwardSearchClient:
    """Client for the award count and award search endpoints.

    Works against the upstream API directly or against this service's own
    ``/api/count`` and ``/api/search`` proxy routes; both speak the same
    request and error format.
    """

    def __init__(self, count_url: str, search_url: str,
                 session: Optional[requests.Session] = None,
                 timeout: float = 30) -> None:
        self.count_url = count_url
        self.search_url = search_url
        self.session = session
        self.timeout = timeout

    def fetch_total_count(self, filters: dict[str, Any]) -> int:
        """Return the number of awards matching *filters*, or 0 on any failure."""
        try:
            payload = post_json(
                self.count_url, {"filters": filters},
                session=self.session, timeout=self.timeout,
            )
            total = sum_counts(payload)
        except UpstreamError as e:
            logger.error(
                "Award count request failed: status=%s detail=%s body=%s",
                e.status_code, e.detail, e.body,
            )
            return 0
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Award count response was malformed: %s", e)
            return 0
        logger.info("Award count: %d", total)
        return total

    def fetch_paged_results(self, filters: dict[str, Any], page: int) -> dict[str, Any]:
        """Return one page of award search results.

        Raises:
            SearchError: If the request failed for any reason.
        """
        body = build_page_request(filters, page)
        try:
            data = post_json(
                self.search_url, body, session=self.session, timeout=self.timeout,
            )
        except UpstreamError as e:
            logger.error(
                "Award search request failed: status=%s detail=%s body=%s",
                e.status_code, e.detail, e.body,
            )
            raise SearchError(e.detail or GENERIC_SEARCH_ERROR, e.status_code) from e

        if not isinstance(data, dict):
            raise SearchError(GENERIC_SEARCH_ERROR)
        logger.info(
            "Award search page %d returned %d rows", page, len(data.get("results") or []),
        )
        return data

    def fetch_results(self, form: FormState, state: PaginationState) -> SearchOutcome:
        """Run one fetch cycle for the current page of *state*.

        Filters are rebuilt from *form* on every call.  The count is fetched
        before the results page; a failed count never prevents results.
        """
        ticket = state.begin_fetch()
        page = state.current_page
        filters = build_filters(form)
        outcome = SearchOutcome(ticket=ticket, page=page, filters=filters)

        outcome.total_count = self.fetch_total_count(filters)
        try:
            outcome.api_result = self.fetch_paged_results(filters, page)
        except SearchError as e:
            outcome.error = e.detail

        outcome.stale = not state.is_current(ticket)
        if outcome.stale:
            logger.info("Discarding results of superseded fetch %d", ticket)
        return outcome

"""Pagination state and derived display values for award search results.

The upstream API never reports a total page count: ``page_metadata.hasNext``
is the only forward signal, and ``page > 1`` is the only backward one.
"""

from __future__ import annotations

import itertools
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from utils.config import PAGE_LIMIT


@dataclass(frozen=True)
class PaginationView:
    """Record range and button state for one page of results."""

    page: int
    start_record: int
    end_record: int
    prev_enabled: bool
    next_enabled: bool
    prev_visible: bool
    next_visible: bool

    @property
    def record_info(self) -> str:
        return (
            f"Showing records {self.start_record} to {self.end_record} "
            f"on page {self.page}"
        )


# Used when a page has no rows: nothing to show, no navigation.
HIDDEN = PaginationView(
    page=1, start_record=0, end_record=0,
    prev_enabled=False, next_enabled=False,
    prev_visible=False, next_visible=False,
)


def compute_pagination(api_result: Mapping[str, Any],
                       limit: int = PAGE_LIMIT) -> PaginationView:
    """Derive the displayed record range and Prev/Next state.

    Args:
        api_result: Decoded ``spending_by_award`` response.
        limit: Page size used for the request.

    Returns:
        PaginationView for the page described by ``page_metadata``.
    """
    metadata = api_result.get("page_metadata") or {}
    page = metadata.get("page") or 1
    has_next = bool(metadata.get("hasNext", False))
    results_count = len(api_result.get("results") or [])

    start_record = (page - 1) * limit + 1
    if has_next:
        end_record = start_record + limit - 1
    else:
        end_record = start_record + results_count - 1

    on_first = page == 1
    return PaginationView(
        page=page,
        start_record=start_record,
        end_record=end_record,
        prev_enabled=not on_first,
        next_enabled=has_next,
        prev_visible=not on_first,
        next_visible=has_next,
    )


class FetchTracker:
    """Latest fetch ticket per search, shared by every request.

    Each browser tab carries its own search id; a results request takes a
    ticket under that id when it starts and checks it again when its
    upstream calls return.  Only the most recent ticket is current.
    """

    def __init__(self, max_searches: int = 1024) -> None:
        self.max_searches = max_searches
        self._sequence = itertools.count(1)
        self._latest: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        """Start a fetch for *key* and return its ticket."""
        with self._lock:
            ticket = next(self._sequence)
            self._latest[key] = ticket
            self._latest.move_to_end(key)
            while len(self._latest) > self.max_searches:
                self._latest.popitem(last=False)
            return ticket

    def is_current(self, key: str, ticket: int) -> bool:
        """Return True unless a newer fetch for *key* has started."""
        with self._lock:
            return self._latest.get(key, ticket) == ticket


class PaginationState:
    """Current page of one search plus its place in the fetch sequence.

    Every fetch cycle takes a ticket from :meth:`begin_fetch`; when the
    response arrives, :meth:`is_current` tells whether a newer cycle was
    started in the meantime, in which case the response must be dropped.
    States built with the same tracker and key share one sequence.
    """

    def __init__(self, current_page: int = 1,
                 tracker: Optional[FetchTracker] = None,
                 key: str = "") -> None:
        self.current_page = max(1, int(current_page))
        self._tracker = tracker if tracker is not None else FetchTracker()
        self._key = key

    def next(self) -> int:
        self.current_page += 1
        return self.current_page

    def previous(self) -> int:
        self.current_page = max(1, self.current_page - 1)
        return self.current_page

    def begin_fetch(self) -> int:
        """Start a fetch cycle and return its ticket."""
        return self._tracker.begin(self._key)

    def is_current(self, ticket: int) -> bool:
        """Return True if *ticket* belongs to the most recently started fetch."""
        return self._tracker.is_current(self._key, ticket)

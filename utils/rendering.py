"""
Result table rendering for award search responses.

Maps rows of a ``spending_by_award`` response to display rows.  Everything
here is plain data; the Jinja2 templates paint it with autoescaping on, so
recipient names and descriptions always reach the page as text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote

from utils.config import PUBLIC_SITE_BASE
from utils.filters import FormState
from utils.formatting import format_amount
from utils.pagination import HIDDEN, PaginationView, compute_pagination

NO_RESULTS_MESSAGE = "No results found. Please try a different search."
FALLBACK_TEXT = "N/A"

_QUOTE = "%22"
_AND = "%20AND%20"


def encode_component(value: Any) -> str:
    """Percent-encode like JavaScript's ``encodeURIComponent``."""
    return quote(str(value), safe="-_.!~*'()")


def recipient_url(recipient_name: Any, agency_type: str = "",
                  sub_agency_type: str = "") -> str:
    """Keyword-search link for a recipient on the public USA Spending site.

    The quoted recipient name is ANDed with the quoted top-tier and sub-tier
    agency names, in that order, for whichever of them is non-empty.
    """
    terms = [recipient_name] + [a for a in (agency_type, sub_agency_type) if a]
    query = _AND.join(f"{_QUOTE}{encode_component(t)}{_QUOTE}" for t in terms)
    return f"{PUBLIC_SITE_BASE}/keyword_search/{query}"


def award_url(generated_internal_id: Any) -> str:
    return f"{PUBLIC_SITE_BASE}/award/{generated_internal_id}"


@dataclass(frozen=True)
class LinkCell:
    """A table cell that is a link when both href and text are present."""

    href: str | None
    text: str | None
    fallback: str = FALLBACK_TEXT

    @property
    def is_link(self) -> bool:
        return bool(self.href and self.text)

    @property
    def label(self) -> str:
        return str(self.text) if self.is_link else self.fallback


@dataclass(frozen=True)
class RenderedRow:
    recipient: LinkCell
    award: LinkCell
    award_type: str
    description: str
    amount: str


@dataclass
class RenderedTable:
    """Rows plus pagination state for one rendered results page."""

    rows: list[RenderedRow] = field(default_factory=list)
    pagination: PaginationView = HIDDEN
    message: str = ""

    @property
    def empty(self) -> bool:
        return not self.rows

    @property
    def record_info(self) -> str:
        return "" if self.empty else self.pagination.record_info


def render_row(award: Mapping[str, Any], form: FormState) -> RenderedRow:
    name = award.get("Recipient Name")
    internal_id = award.get("generated_internal_id")
    return RenderedRow(
        recipient=LinkCell(
            href=recipient_url(name, form.agency_type, form.sub_agency_type) if name else None,
            text=name,
        ),
        award=LinkCell(
            href=award_url(internal_id) if internal_id else None,
            text=award.get("Award ID"),
        ),
        award_type=award.get("Award Type") or FALLBACK_TEXT,
        description=award.get("Description") or FALLBACK_TEXT,
        amount=format_amount(award.get("Award Amount")),
    )


def render_results(api_result: Mapping[str, Any], form: FormState) -> RenderedTable:
    """Map a search response to table rows and pagination controls.

    An empty result set yields a single placeholder message with both
    pagination buttons hidden, whatever ``page_metadata`` says.
    """
    results = api_result.get("results") or []
    if not results:
        return RenderedTable(message=NO_RESULTS_MESSAGE)

    rows = [render_row(award, form) for award in results]
    return RenderedTable(rows=rows, pagination=compute_pagination(api_result))

"""
Award search filter construction.

Turns the raw values of the search form into the ``filters`` object the
USA Spending ``spending_by_award`` and ``spending_by_award_count`` endpoints
expect.  The result is sparse: a key is only present when the form supplied
something for it, except ``award_type_codes`` (always present) and
``time_period`` (always present, defaulted to a rolling window).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Mapping

from utils.config import AwardTypes

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 180

# Raw form field name → FormState attribute
_FORM_FIELDS = {
    "keyword": "keyword",
    "agencyType": "agency_type",
    "subAgencyType": "sub_agency_type",
    "agencyDetails": "agency_details",
    "placeOfPerformanceScope": "place_of_performance_scope",
    "recipientScope": "recipient_scope",
    "recipientSearchText": "recipient_search_text",
    "awardType": "award_type",
    "startDate": "start_date",
    "endDate": "end_date",
    "dateType": "date_type",
}


@dataclass(frozen=True)
class FormState:
    """Values of the search form at submit time."""

    keyword: str = ""
    agency_type: str = ""
    sub_agency_type: str = ""
    agency_details: str = ""          # "awarding" or "funding"
    place_of_performance_scope: str = ""
    recipient_scope: str = ""
    recipient_search_text: str = ""   # comma-separated recipient names
    award_type: str = ""
    start_date: str = ""
    end_date: str = ""
    date_type: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FormState":
        """Build a FormState from form/query parameters keyed by UI field name.

        Missing or None values become empty strings; every value is trimmed.
        """
        values = {}
        for field_name, attr in _FORM_FIELDS.items():
            raw = data.get(field_name)
            values[attr] = "" if raw is None else str(raw).strip()
        return cls(**values)

    def to_params(self) -> dict[str, str]:
        """Inverse of from_mapping, for re-submitting the same form state."""
        return {field_name: getattr(self, attr) for field_name, attr in _FORM_FIELDS.items()}


def default_dates(today: date | None = None) -> tuple[str, str]:
    """Return the default (start, end) window: 180 days ending today."""
    today = today or date.today()
    start = today - timedelta(days=DEFAULT_WINDOW_DAYS)
    return start.isoformat(), today.isoformat()


def resolve_award_type_codes(award_type: str) -> list[str]:
    """Map the award type selection to a list of upstream award type codes.

    Group aliases expand to their codes, a single known code is passed
    through, anything else falls back to all contract codes.
    """
    if award_type in AwardTypes.GROUPS:
        return list(AwardTypes.GROUPS[award_type])
    if award_type in AwardTypes.SINGLE_CODES:
        return [award_type]
    logger.warning(
        "Unrecognised awardType %r; defaulting to %s",
        award_type, list(AwardTypes.DEFAULT),
    )
    return list(AwardTypes.DEFAULT)


def resolve_agency(agency_type: str, sub_agency_type: str,
                   agency_details: str) -> dict[str, str] | None:
    """Return the single ``agencies`` entry for the form, or None.

    A sub-tier name always wins over the top-tier name.  The agency type
    ("awarding"/"funding") defaults to "awarding".
    """
    kind = agency_details or "awarding"
    if sub_agency_type:
        return {"type": kind, "tier": "subtier", "name": sub_agency_type}
    if agency_type:
        return {
            "type": kind,
            "tier": "toptier",
            "name": agency_type,
            "toptier_name": agency_type,
        }
    return None


def split_recipients(text: str) -> list[str]:
    """Split comma-separated recipient names, dropping blank entries."""
    return [item.strip() for item in text.split(",") if item.strip()]


def build_filters(form: FormState, today: date | None = None) -> dict[str, Any]:
    """Build the upstream ``filters`` object for *form*.

    Args:
        form: Search form values.
        today: Reference date for the default time window (default: today).

    Returns:
        Filter dict ready to post as ``{"filters": ...}``.
    """
    start_date, end_date = form.start_date, form.end_date
    if not start_date or not end_date:
        default_start, default_end = default_dates(today)
        start_date = start_date or default_start
        end_date = end_date or default_end

    filters: dict[str, Any] = {}

    if form.keyword:
        filters["keywords"] = [form.keyword.strip()]

    filters["award_type_codes"] = resolve_award_type_codes(form.award_type)

    period = {"start_date": start_date, "end_date": end_date}
    if form.date_type:
        period["date_type"] = form.date_type
    filters["time_period"] = [period]

    agency = resolve_agency(form.agency_type, form.sub_agency_type, form.agency_details)
    if agency is not None:
        filters["agencies"] = [agency]

    if form.place_of_performance_scope:
        filters["place_of_performance_scope"] = form.place_of_performance_scope.strip()
    if form.recipient_scope:
        filters["recipient_scope"] = form.recipient_scope.strip()

    recipients = split_recipients(form.recipient_search_text)
    if recipients:
        filters["recipient_search_text"] = recipients

    logger.debug("Filters built: %s", filters)
    return filters

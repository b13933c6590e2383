"""
Frontend HTML routes.

Serves the Jinja2 templates for the award search UI.

Routes:
    GET /                   → index.html (search form + empty results area)
    GET /partials/results   → partials/results.html (HTMX swap target)

Each results request is one full fetch cycle: filters are rebuilt from the
submitted form fields, the total count is fetched, then the requested page.
Prev/Next buttons re-submit the current form with the page being shown and
``nav=prev`` or ``nav=next``; submitting the form itself sends neither, so
it always asks for page 1.

Every rendering of the search page gets its own ``searchId``.  Results
requests sharing a search id are fenced: a request that a newer one has
overtaken answers 204 and HTMX leaves the results area alone.
"""

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from api.upstream import get_client, get_tracker
from utils.client import AwardSearchClient
from utils.config import AwardTypes
from utils.filters import FormState
from utils.pagination import FetchTracker, PaginationState
from utils.rendering import render_results

logger = logging.getLogger(__name__)

router = APIRouter(tags=["frontend"])

# Templates instance is set by create_app() after mounting.
_templates: Jinja2Templates | None = None

AGENCY_DETAIL_OPTIONS = [("awarding", "Awarding Agency"), ("funding", "Funding Agency")]

DATE_TYPE_OPTIONS = [
    ("", "Default"),
    ("action_date", "Action Date"),
    ("date_signed", "Date Signed"),
    ("last_modified_date", "Last Modified Date"),
    ("new_awards_only", "New Awards Only"),
]

SCOPE_OPTIONS = [("", "Any"), ("domestic", "Domestic"), ("foreign", "Foreign")]


def set_templates(t: Jinja2Templates) -> None:
    global _templates
    _templates = t


def _tmpl() -> Jinja2Templates:
    if _templates is None:
        raise RuntimeError("Templates not initialised, call set_templates() first")
    return _templates


def _award_type_options() -> list[tuple[str, str]]:
    options = [
        ("", "Select an award type"),
        ("all_contracts", "All Contracts"),
        ("all_idvs", "All IDVs"),
        ("all_grants", "All Grants"),
    ]
    options.extend((code, f"{code} - {label}") for code, label in AwardTypes.LABELS.items())
    return options


def _parse_page(request: Request) -> int:
    """Requested page from the query string; anything invalid means page 1."""
    try:
        return max(1, int(request.query_params.get("page", 1)))
    except ValueError:
        return 1


def _pagination_state(request: Request, tracker: FetchTracker) -> PaginationState:
    """Page to fetch for this request, after applying any Prev/Next action."""
    search_id = request.query_params.get("searchId", "").strip()
    if search_id:
        state = PaginationState(_parse_page(request), tracker=tracker, key=search_id)
    else:
        # No id to fence on; this request is its own sequence.
        state = PaginationState(_parse_page(request))

    nav = request.query_params.get("nav")
    if nav == "next":
        state.next()
    elif nav == "prev":
        state.previous()
    return state


def _form_context(form: FormState) -> dict[str, Any]:
    return {
        "form": form.to_params(),
        "award_type_options": _award_type_options(),
        "agency_detail_options": AGENCY_DETAIL_OPTIONS,
        "date_type_options": DATE_TYPE_OPTIONS,
        "scope_options": SCOPE_OPTIONS,
    }


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(request: Request) -> HTMLResponse:
    """Main search page."""
    form = FormState.from_mapping(request.query_params)
    return _tmpl().TemplateResponse(
        request,
        "index.html",
        {"request": request, "search_id": uuid.uuid4().hex, **_form_context(form)},
    )


@router.get("/partials/results", response_class=HTMLResponse, include_in_schema=False)
def results_partial(
    request: Request,
    client: AwardSearchClient = Depends(get_client),
    tracker: FetchTracker = Depends(get_tracker),
) -> Response:
    """HTMX partial: total count, results table, and pagination controls."""
    form = FormState.from_mapping(request.query_params)
    state = _pagination_state(request, tracker)

    outcome = client.fetch_results(form, state)
    if outcome.stale:
        # Nothing to swap in; a newer request owns the results area.
        return Response(status_code=204)

    table = render_results(outcome.api_result, form) if outcome.ok else None
    return _tmpl().TemplateResponse(
        request,
        "partials/results.html",
        {
            "request": request,
            "form": form.to_params(),
            "current_page": state.current_page,
            "total_count": outcome.total_count,
            "error": outcome.error,
            "table": table,
        },
    )

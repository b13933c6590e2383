"""
Tests for utils/filters.py: FormState and build_filters

Covers the default date window, award type resolution, the agency
resolution table, recipient splitting, and scalar passthroughs.
"""
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.filters import (
    FormState,
    build_filters,
    default_dates,
    resolve_agency,
    resolve_award_type_codes,
    split_recipients,
)

TODAY = date(2024, 6, 30)


# ── FormState ────────────────────────────────────────────────────────────────

class TestFormState:
    def test_defaults_empty(self):
        form = FormState()
        assert form.keyword == ""
        assert form.award_type == ""

    def test_from_mapping_uses_ui_field_names(self):
        form = FormState.from_mapping({
            "keyword": "  laser ",
            "agencyType": "Department of Defense",
            "subAgencyType": " Department of the Navy ",
            "agencyDetails": "funding",
            "awardType": "all_grants",
            "startDate": "2024-01-01",
        })
        assert form.keyword == "laser"
        assert form.agency_type == "Department of Defense"
        assert form.sub_agency_type == "Department of the Navy"
        assert form.agency_details == "funding"
        assert form.award_type == "all_grants"
        assert form.start_date == "2024-01-01"
        assert form.end_date == ""

    def test_from_mapping_none_becomes_empty(self):
        form = FormState.from_mapping({"keyword": None})
        assert form.keyword == ""

    def test_to_params_inverts_from_mapping(self):
        params = {"keyword": "laser", "awardType": "A", "dateType": "action_date"}
        form = FormState.from_mapping(params)
        again = FormState.from_mapping(form.to_params())
        assert again == form


# ── Default dates ────────────────────────────────────────────────────────────

class TestDefaultDates:
    def test_180_day_window(self):
        assert default_dates(TODAY) == ("2024-01-02", "2024-06-30")

    def test_defaults_to_today(self):
        start, end = default_dates()
        assert end == date.today().isoformat()
        assert start == (date.today() - timedelta(days=180)).isoformat()

    def test_both_missing_uses_window(self):
        filters = build_filters(FormState(), today=TODAY)
        assert filters["time_period"] == [
            {"start_date": "2024-01-02", "end_date": "2024-06-30"}
        ]

    def test_only_missing_end_is_defaulted(self):
        filters = build_filters(FormState(start_date="2023-03-01"), today=TODAY)
        assert filters["time_period"][0]["start_date"] == "2023-03-01"
        assert filters["time_period"][0]["end_date"] == "2024-06-30"

    def test_only_missing_start_is_defaulted(self):
        filters = build_filters(FormState(end_date="2024-02-01"), today=TODAY)
        assert filters["time_period"][0]["start_date"] == "2024-01-02"
        assert filters["time_period"][0]["end_date"] == "2024-02-01"

    def test_both_present_kept(self):
        form = FormState(start_date="2020-01-01", end_date="2020-12-31")
        period = build_filters(form, today=TODAY)["time_period"][0]
        assert period == {"start_date": "2020-01-01", "end_date": "2020-12-31"}

    def test_date_type_included_when_set(self):
        form = FormState(date_type="action_date")
        period = build_filters(form, today=TODAY)["time_period"][0]
        assert period["date_type"] == "action_date"

    def test_date_type_omitted_when_empty(self):
        period = build_filters(FormState(), today=TODAY)["time_period"][0]
        assert "date_type" not in period

    def test_window_spans_180_days_ending_today(self):
        period = build_filters(FormState())["time_period"][0]
        start = date.fromisoformat(period["start_date"])
        end = date.fromisoformat(period["end_date"])
        assert end == date.today()
        assert (end - start).days == 180


# ── Award types ──────────────────────────────────────────────────────────────

class TestAwardTypes:
    def test_all_contracts(self):
        assert resolve_award_type_codes("all_contracts") == ["A", "B", "C", "D"]

    def test_all_idvs(self):
        assert resolve_award_type_codes("all_idvs") == [
            "IDV_A", "IDV_B", "IDV_B_A", "IDV_B_B", "IDV_B_C", "IDV_C", "IDV_D", "IDV_E",
        ]

    def test_all_grants(self):
        assert resolve_award_type_codes("all_grants") == ["02", "03", "04", "05"]

    @pytest.mark.parametrize("code", ["A", "D", "02", "05", "IDV_B_C", "IDV_E"])
    def test_single_code(self, code):
        assert resolve_award_type_codes(code) == [code]

    @pytest.mark.parametrize("value", ["", "grants", "idv_a", "E"])
    def test_unknown_falls_back_to_contracts(self, value):
        assert resolve_award_type_codes(value) == ["A", "B", "C", "D"]

    def test_fallback_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="utils.filters"):
            resolve_award_type_codes("")
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_award_type_codes_always_present(self):
        assert build_filters(FormState(), today=TODAY)["award_type_codes"] == [
            "A", "B", "C", "D",
        ]


# ── Agencies ─────────────────────────────────────────────────────────────────

class TestAgencyResolution:
    def test_all_three_set_uses_subtier(self):
        assert resolve_agency("DOD", "Navy", "funding") == {
            "type": "funding", "tier": "subtier", "name": "Navy",
        }

    def test_top_and_sub_defaults_awarding(self):
        assert resolve_agency("DOD", "Navy", "") == {
            "type": "awarding", "tier": "subtier", "name": "Navy",
        }

    def test_top_and_details(self):
        assert resolve_agency("DOD", "", "funding") == {
            "type": "funding", "tier": "toptier", "name": "DOD", "toptier_name": "DOD",
        }

    def test_top_only(self):
        assert resolve_agency("DOD", "", "") == {
            "type": "awarding", "tier": "toptier", "name": "DOD", "toptier_name": "DOD",
        }

    def test_sub_and_details(self):
        assert resolve_agency("", "Navy", "funding") == {
            "type": "funding", "tier": "subtier", "name": "Navy",
        }

    def test_sub_only(self):
        assert resolve_agency("", "Navy", "") == {
            "type": "awarding", "tier": "subtier", "name": "Navy",
        }

    @pytest.mark.parametrize("details", ["", "awarding", "funding"])
    def test_no_agency_names(self, details):
        assert resolve_agency("", "", details) is None

    def test_top_tier_name_does_not_change_subtier_result(self):
        assert resolve_agency("DOD", "Navy", "funding") == resolve_agency("", "Navy", "funding")
        assert resolve_agency("DOD", "Navy", "") == resolve_agency("", "Navy", "")

    def test_build_filters_agencies_list(self):
        form = FormState(agency_type="DOD", sub_agency_type="Navy", agency_details="funding")
        assert build_filters(form, today=TODAY)["agencies"] == [
            {"type": "funding", "tier": "subtier", "name": "Navy"}
        ]

    def test_build_filters_top_only(self):
        form = FormState(agency_type="DOD")
        assert build_filters(form, today=TODAY)["agencies"] == [
            {"type": "awarding", "tier": "toptier", "name": "DOD", "toptier_name": "DOD"}
        ]

    def test_build_filters_no_agencies_key(self):
        form = FormState(agency_details="funding")
        assert "agencies" not in build_filters(form, today=TODAY)


# ── Recipients and scalars ───────────────────────────────────────────────────

class TestRecipientsAndScopes:
    def test_split_drops_blank_tokens(self):
        assert split_recipients("Acme, , Globex ,") == ["Acme", "Globex"]

    def test_split_empty(self):
        assert split_recipients("") == []
        assert split_recipients(" , ,") == []

    def test_recipient_search_text_added(self):
        form = FormState(recipient_search_text="Acme, , Globex ,")
        assert build_filters(form, today=TODAY)["recipient_search_text"] == ["Acme", "Globex"]

    def test_recipient_search_text_omitted_when_blank(self):
        form = FormState(recipient_search_text=" , ")
        assert "recipient_search_text" not in build_filters(form, today=TODAY)

    def test_scopes_passthrough(self):
        form = FormState(place_of_performance_scope="domestic", recipient_scope="foreign")
        filters = build_filters(form, today=TODAY)
        assert filters["place_of_performance_scope"] == "domestic"
        assert filters["recipient_scope"] == "foreign"

    def test_scopes_omitted_when_empty(self):
        filters = build_filters(FormState(), today=TODAY)
        assert "place_of_performance_scope" not in filters
        assert "recipient_scope" not in filters

    def test_keyword_omitted_when_empty(self):
        assert "keywords" not in build_filters(FormState(), today=TODAY)


# ── Whole-object behaviour ───────────────────────────────────────────────────

class TestBuildFilters:
    def test_grant_keyword_search(self):
        form = FormState.from_mapping({"keyword": "laser", "awardType": "all_grants"})
        assert build_filters(form, today=TODAY) == {
            "keywords": ["laser"],
            "award_type_codes": ["02", "03", "04", "05"],
            "time_period": [{"start_date": "2024-01-02", "end_date": "2024-06-30"}],
        }

    def test_deterministic(self):
        form = FormState(
            keyword="laser", agency_type="DOD", recipient_search_text="Acme,Globex",
            award_type="IDV_A", date_type="action_date",
        )
        assert build_filters(form, today=TODAY) == build_filters(form, today=TODAY)

    def test_does_not_mutate_form(self):
        form = FormState(keyword="laser")
        build_filters(form, today=TODAY)
        assert form == FormState(keyword="laser")

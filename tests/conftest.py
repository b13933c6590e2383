"""
Pytest fixtures for the award search proxy tests.

Provides a test AppConfig pointing at a fake upstream, a factory for mocked
``requests`` responses, a mocked session that routes POSTs by URL, a fresh
fetch tracker, and a TestClient wired to both.  No test touches the network.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient  # noqa: E402

from api.app import create_app  # noqa: E402
from api.upstream import get_client, get_session, get_tracker  # noqa: E402
from utils.client import AwardSearchClient  # noqa: E402
from utils.config import AppConfig  # noqa: E402
from utils.pagination import FetchTracker  # noqa: E402

UPSTREAM = "https://upstream.test/api/v2"
SEARCH_URL = UPSTREAM + "/search/spending_by_award/"
COUNT_URL = UPSTREAM + "/search/spending_by_award_count/"


def _response(status=200, json_body=None, text=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    if json_body is not None:
        resp.json.return_value = json_body
        resp.text = json.dumps(json_body)
    else:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
        resp.text = text or ""
    return resp


@pytest.fixture()
def make_response():
    """Factory for mocked ``requests.Response`` objects."""
    return _response


@pytest.fixture()
def upstream_session():
    """Mocked requests.Session whose POSTs are answered from ``routes``.

    Set ``session.routes[url]`` to a response, or to an exception instance
    to have the POST raise it.  Unrouted URLs answer 404.
    """
    session = MagicMock()
    session.routes = {}

    def _post(url, **kwargs):
        answer = session.routes.get(url, _response(404, {"detail": "Not found"}))
        if isinstance(answer, Exception):
            raise answer
        return answer

    session.post.side_effect = _post
    return session


@pytest.fixture()
def app_config():
    return AppConfig.from_dict({
        "api_base": UPSTREAM,
        "upstream_timeout": 5.0,
        "max_body_bytes": 4096,
        "log_format": "text",
        "cors_origins": ["*"],
    })


@pytest.fixture()
def fetch_tracker():
    return FetchTracker()


@pytest.fixture()
def app(app_config, upstream_session, fetch_tracker):
    application = create_app(config=app_config)
    application.dependency_overrides[get_tracker] = lambda: fetch_tracker
    application.dependency_overrides[get_session] = lambda: upstream_session
    application.dependency_overrides[get_client] = lambda: AwardSearchClient(
        count_url=COUNT_URL,
        search_url=SEARCH_URL,
        session=upstream_session,
        timeout=app_config.upstream_timeout,
    )
    return application


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def award_rows():
    """Two rows shaped like spending_by_award results."""
    return [
        {
            "internal_id": 101,
            "Award ID": "N0001924C0001",
            "Recipient Name": "Acme Corp",
            "Award Amount": 1234567.5,
            "Award Type": "Definitive Contract",
            "Description": "Laser research",
            "Awarding Agency": "Department of Defense",
            "generated_internal_id": "CONT_AWD_N0001924C0001_9700",
        },
        {
            "internal_id": 102,
            "Award ID": "FA865024C0002",
            "Recipient Name": "Globex",
            "Award Amount": None,
            "Award Type": "Purchase Order",
            "Description": None,
            "Awarding Agency": "Department of Defense",
            "generated_internal_id": "CONT_AWD_FA865024C0002_9700",
        },
    ]

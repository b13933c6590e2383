"""
Upstream connection management for the API.

Holds the application config, one pooled HTTP session and the results
fetch tracker shared by every request, and exposes them as FastAPI
dependencies.  create_app() installs its config here via configure();
tests override the dependencies with app.dependency_overrides.
"""

import requests

from utils.client import AwardSearchClient
from utils.config import AppConfig
from utils.http import SessionManager
from utils.pagination import FetchTracker

_config: AppConfig = AppConfig.from_env()
_sessions: SessionManager = SessionManager()
_tracker: FetchTracker = FetchTracker()


def configure(config: AppConfig) -> None:
    """Install *config* and start a fresh session pool and fetch tracker."""
    global _config, _sessions, _tracker
    _sessions.close()
    _config = config
    _sessions = SessionManager()
    _tracker = FetchTracker()


def close() -> None:
    _sessions.close()


def get_config() -> AppConfig:
    """Return the active application config."""
    return _config


def get_session() -> requests.Session:
    """Return the shared pooled session for upstream calls."""
    return _sessions.session


def get_tracker() -> FetchTracker:
    """Return the fetch sequence shared by every results request."""
    return _tracker


def get_client() -> AwardSearchClient:
    """Return an award search client bound to the configured upstream."""
    return AwardSearchClient(
        count_url=_config.count_url,
        search_url=_config.search_url,
        session=get_session(),
        timeout=_config.upstream_timeout,
    )

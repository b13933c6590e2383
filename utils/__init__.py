"""Shared utilities for the USA Spending award search proxy."""

# Configuration
from utils.config import (
    AppConfig,
    AwardTypes,
    Config,
    FIXED_FIELDS,
    PAGE_LIMIT,
)

# HTTP utilities
from utils.http import SessionManager, UpstreamError, post_json

# Filter construction
from utils.filters import FormState, build_filters, default_dates

# Pagination
from utils.pagination import (
    FetchTracker,
    PaginationState,
    PaginationView,
    compute_pagination,
)

# Output formatting
from utils.formatting import format_amount

# Result rendering
from utils.rendering import RenderedRow, RenderedTable, render_results

# Count/search client
from utils.client import AwardSearchClient, SearchError, SearchOutcome

__all__ = [
    # Configuration
    "AppConfig",
    "AwardTypes",
    "Config",
    "FIXED_FIELDS",
    "PAGE_LIMIT",
    # HTTP
    "SessionManager",
    "UpstreamError",
    "post_json",
    # Filters
    "FormState",
    "build_filters",
    "default_dates",
    # Pagination
    "FetchTracker",
    "PaginationState",
    "PaginationView",
    "compute_pagination",
    # Formatting
    "format_amount",
    # Rendering
    "RenderedRow",
    "RenderedTable",
    "render_results",
    # Client
    "AwardSearchClient",
    "SearchError",
    "SearchOutcome",
]

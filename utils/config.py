"""Configuration management utilities for the award search proxy.

Provides reusable pieces for:
- A dict-backed Config base class
- Application settings loaded from environment variables
- Known upstream values (award type codes, requested fields)
"""

import os as _os
from typing import Any, Dict


# ── Upstream constants ────────────────────────────────────────────────────────

DEFAULT_API_BASE = "https://api.usaspending.gov/api/v2"
SEARCH_PATH = "/search/spending_by_award/"
COUNT_PATH = "/search/spending_by_award_count/"

PUBLIC_SITE_BASE = "https://www.usaspending.gov"

# Results per page for every search request.
PAGE_LIMIT = 10

# Requested on every spending_by_award call; the upstream rejects unknown names.
FIXED_FIELDS: tuple[str, ...] = (
    "Awarding Agency",
    "Awarding Agency Code",
    "Awarding Sub Agency",
    "Awarding Sub Agency Code",
    "Funding Agency",
    "Funding Agency Code",
    "Funding Sub Agency",
    "Funding Sub Agency Code",
    "Award ID",
    "Award Amount",
    "Infrastructure Outlays",
    "Infrastructure Obligations",
    "Description",
    "Award Type",
    "Primary Place of Performance",
    "Last Modified Date",
    "Base Obligation Date",
    "Recipient Name",
    "Recipient UEI",
    "recipient_id",
    "prime_award_recipient_id",
)


class AwardTypes:
    """Award type codes accepted by the upstream award search."""

    CONTRACTS = ("A", "B", "C", "D")
    IDVS = ("IDV_A", "IDV_B", "IDV_B_A", "IDV_B_B", "IDV_B_C", "IDV_C", "IDV_D", "IDV_E")
    GRANTS = ("02", "03", "04", "05")

    # Group aliases offered by the search form
    GROUPS = {
        "all_contracts": CONTRACTS,
        "all_idvs": IDVS,
        "all_grants": GRANTS,
    }

    SINGLE_CODES = frozenset(CONTRACTS + GRANTS + IDVS)

    DEFAULT = CONTRACTS

    LABELS = {
        "A": "BPA Call",
        "B": "Purchase Order",
        "C": "Delivery Order",
        "D": "Definitive Contract",
        "02": "Block Grant",
        "03": "Formula Grant",
        "04": "Project Grant",
        "05": "Cooperative Agreement",
        "IDV_A": "GWAC Government Wide Acquisition Contract",
        "IDV_B": "IDC Multi-Agency Contract, Other Indefinite Delivery Contract",
        "IDV_B_A": "IDC Indefinite Delivery Contract / Requirements",
        "IDV_B_B": "IDC Indefinite Delivery Contract / Indefinite Quantity",
        "IDV_B_C": "IDC Indefinite Delivery Contract / Definite Quantity",
        "IDV_C": "FSS Federal Supply Schedule",
        "IDV_D": "BOA Basic Ordering Agreement",
        "IDV_E": "BPA Blanket Purchase Agreement",
    }


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        """Initialize configuration with default values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance with values from dictionary
        """
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config


class AppConfig(Config):
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the proxy works out of the box
    against the public API without any configuration.

    Environment variables:
        APP_PORT: Server port (default: 3000)
        APP_HOST: Server bind address (default: 127.0.0.1)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed origins (default: *)
        USASPENDING_API_BASE: Upstream API root (default: public v2 API)
        APP_UPSTREAM_TIMEOUT: Seconds to wait for the upstream (default: 30)
        APP_MAX_BODY_BYTES: Largest proxied request body accepted (default: 65536)
    """

    def __init__(self) -> None:
        super().__init__()
        self.api_port = int(_os.getenv("APP_PORT", "3000"))
        self.api_host = _os.getenv("APP_HOST", "127.0.0.1")
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        raw_origins = _os.getenv("APP_CORS_ORIGINS", "*")
        self.cors_origins: list[str] = (
            ["*"] if raw_origins == "*"
            else [o.strip() for o in raw_origins.split(",") if o.strip()]
        )
        self.api_base = _os.getenv("USASPENDING_API_BASE", DEFAULT_API_BASE).rstrip("/")
        self.upstream_timeout = float(_os.getenv("APP_UPSTREAM_TIMEOUT", "30"))
        self.max_body_bytes = int(_os.getenv("APP_MAX_BODY_BYTES", "65536"))

    @property
    def search_url(self) -> str:
        return self.api_base + SEARCH_PATH

    @property
    def count_url(self) -> str:
        return self.api_base + COUNT_PATH

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()

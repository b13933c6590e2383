"""
Pydantic response models for the API.

The proxy routes relay upstream JSON unchanged, so only the bodies this
service produces itself are modelled here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProxyErrorOut(BaseModel):
    """Error body returned by /api/search and /api/count."""
    detail: str = Field(..., description="Human-readable error message",
                        examples=["Error proxying request to USA Spending API."])
    originalError: Any = Field(None, description="Upstream error body, or null when no response arrived")


class ErrorOut(BaseModel):
    """Error body for unhandled application errors."""
    error: str = Field(..., description="Error category", examples=["Bad request"])
    detail: str = Field(..., description="Exception message")
    status_code: int = Field(..., description="HTTP status code", examples=[400])


class HealthOut(BaseModel):
    """Response body for GET /health."""
    status: str = Field(..., description="'ok' when the service is running", examples=["ok"])
    upstream: str = Field(..., description="Upstream API root", examples=["https://api.usaspending.gov/api/v2"])

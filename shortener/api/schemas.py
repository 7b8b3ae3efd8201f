"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
"""

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    # Any non-empty string is stored; syntax is only checked on redirect
    url: str = Field(..., min_length=1, description="The long URL to shorten")


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    short_code: str = Field(..., description="The allocated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    short_code: str
    original_url: str
    visit_count: int

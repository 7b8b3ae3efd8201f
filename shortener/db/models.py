"""
Database Models for URL Shortener Service

This module defines the SQLModel schema for the single persisted entity:
- Record: maps a short code to its original URL and counts visits

Design Decisions:
- code is the primary key; lookups by code are the hot path
- url carries a unique constraint so a URL maps to exactly one code,
  which the allocator relies on for its upsert
- visit_count lives on the row and is only ever incremented in place

PostgreSQL names the constraints record_pkey and record_url_key, which the
PostgreSQL adapter uses to tell a code collision from a url conflict.
"""

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String, Text

CODE_MAX_LENGTH = 6


class Record(SQLModel, table=True):
    """
    Short code to URL mapping.

    Fields:
    - code: Random short code, immutable once created
    - url: The original target, unique across all records
    - visit_count: Number of redirects served, starts at 0
    """
    __tablename__ = "record"

    code: str = Field(
        sa_column=Column(String(CODE_MAX_LENGTH), primary_key=True),
        max_length=CODE_MAX_LENGTH
    )
    url: str = Field(sa_column=Column(Text, nullable=False, unique=True))
    visit_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0, server_default="0")
    )

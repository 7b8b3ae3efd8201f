"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: Dialect-specific implementations
- RecordStore: The store adapter used by the shortening service
- StoreError: Store-agnostic failure shape

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Register it in get_database_adapter() in session.py
"""

from shortener.db.errors import StoreError, StoreErrorKind
from shortener.db.interface import DatabaseAdapter
from shortener.db.session import create_session_maker, get_database_adapter
from shortener.db.store import RecordStore

__all__ = [
    "DatabaseAdapter",
    "RecordStore",
    "StoreError",
    "StoreErrorKind",
    "create_session_maker",
    "get_database_adapter",
]

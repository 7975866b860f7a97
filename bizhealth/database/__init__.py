"""
Database Package
Handles database connection, session management, and base models.
"""

from bizhealth.database.connection import (
    async_engine,
    async_session_factory,
    create_engine_from_settings,
    session_scope,
    get_async_session,
    close_db,
)
from bizhealth.database.base import Base, TimestampMixin, UUIDMixin

__all__ = [
    # Connection
    "async_engine",
    "async_session_factory",
    "create_engine_from_settings",
    "session_scope",
    "get_async_session",
    "close_db",
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
]

"""
Database Package Initialization.

============================================================
MONITORING AUDIT TRAIL
============================================================

Async SQLAlchemy engine, sessions and transaction scope for
persisting monitoring snapshots. The ORM models live in
risk_scoring.models and register on Base.

Persistence is optional. Every failure raises a
DatabasePersistenceError subclass; callers decide whether it
is fatal.

============================================================
"""

from .engine import (
    # Declarative base
    Base,

    # Engine creation
    get_database_url,
    create_database_engine,
    create_session_factory,

    # Session management
    transaction_scope,

    # Database initialization
    verify_database_connection,
    create_all_tables,

    # Exceptions
    DatabasePersistenceError,
    DatabaseConnectionError,
    DatabaseInitializationError,
)


__all__ = [
    "Base",
    "get_database_url",
    "create_database_engine",
    "create_session_factory",
    "transaction_scope",
    "verify_database_connection",
    "create_all_tables",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
]

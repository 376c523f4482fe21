"""
Database Persistence Layer - Core Engine.

============================================================
PURPOSE
============================================================
Declarative base, async engine and session management for
the monitoring audit trail.

Requirements:
- SQLAlchemy 2.0 async ORM (asyncpg driver for PostgreSQL)
- Explicit transaction management
- Structured logging

Persistence is optional: without DATABASE_URL the service
runs without an audit trail.

============================================================
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

# =============================================================
# DECLARATIVE BASE
# =============================================================

Base = declarative_base()


# =============================================================
# DATABASE ENGINE
# =============================================================


def get_database_url(env_file: Optional[str] = None) -> Optional[str]:
    """
    Database URL from the environment, normalized for asyncpg.

    Returns None when persistence is not configured.
    """
    load_dotenv(env_file)
    url = os.getenv("DATABASE_URL")
    if not url:
        return None
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def create_database_engine(
    database_url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine.

    Args:
        database_url: Async driver URL
        pool_size: Number of connections to keep in pool
        max_overflow: Max connections beyond pool_size
        pool_recycle: Recycle connections after N seconds
        echo: Log SQL statements
    """
    logger.info(f"Creating database engine for: {database_url.split('@')[-1]}")

    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        echo=echo,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


# =============================================================
# SESSION MANAGEMENT
# =============================================================


@asynccontextmanager
async def transaction_scope(factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """
    Async session with explicit transaction boundaries.

    Commits only if no exception occurs; rolls back on any
    exception and re-raises it as DatabasePersistenceError.

    Usage:
        async with transaction_scope(factory) as session:
            await MonitoringRepository(session).save_result(result)
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
            logger.debug("Database transaction committed successfully")
        except SQLAlchemyError as e:
            logger.error(f"Database transaction failed, rolling back: {e}")
            await session.rollback()
            raise DatabasePersistenceError(f"Transaction failed: {e}") from e


# =============================================================
# DATABASE INITIALIZATION
# =============================================================


async def verify_database_connection(engine: AsyncEngine) -> bool:
    """
    Verify database connection is working.

    Raises:
        DatabaseConnectionError if connection fails
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        raise DatabaseConnectionError(f"Cannot connect to database: {e}") from e

    logger.info("Database connection verified successfully")
    return True


async def create_all_tables(engine: AsyncEngine) -> None:
    """
    Create all tables registered on Base.

    Raises:
        DatabaseInitializationError if table creation fails
    """
    # Register models with Base
    from risk_scoring import models  # noqa: F401

    try:
        logger.info("Creating database tables...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")
        raise DatabaseInitializationError(f"Table creation failed: {e}") from e


# =============================================================
# CUSTOM EXCEPTIONS
# =============================================================


class DatabasePersistenceError(Exception):
    """Raised when a database write fails."""
    pass


class DatabaseConnectionError(DatabasePersistenceError):
    """Raised when the database is unreachable."""
    pass


class DatabaseInitializationError(DatabasePersistenceError):
    """Raised when schema creation fails."""
    pass

"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults
- Test database support (in-memory sqlite)
- Table definitions for the SalesPath store
"""
from typing import Optional, Generator
from sqlalchemy import (
    create_engine,
    MetaData,
    Table,
    Column,
    String,
    Text,
    DateTime,
    Boolean,
    Integer,
    Float,
    Index,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.sql import func
import logging
import os

from salespath_admin.core.config import settings

logger = logging.getLogger("salespath.db")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Global engine and session factory
_engine = None
_SessionLocal = None

SUBSCRIPTION_STATUSES = ("TRIAL", "ACTIVE", "CANCELLED", "PAST_DUE", "EXPIRED", "PENDING")


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def build_engine(url: str) -> Engine:
    """Create an engine for `url` with pooling suited to its backend."""
    if make_url(url).get_backend_name() == "sqlite":
        # One shared connection so an in-memory database survives across sessions
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        echo=False,  # Set to True for SQL query logging
    )


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    _engine = build_engine(url)

    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI-friendly DB dependency that yields a Session and closes it.

    Use this with `Depends(get_db)` in route functions.
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


users = Table(
    'users',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('email', String(320), nullable=True, unique=True),
    Column('name', Text, nullable=True),
    Column('is_admin', Boolean, nullable=False, server_default='0'),
    Column('email_verified', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_users_created_at', 'created_at'),
)

plans = Table(
    'plans',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('name', String(200), nullable=False),
    Column('max_offers', Integer, nullable=False, server_default='0'),
    Column('price', Float, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    CheckConstraint('max_offers >= 0', name='ck_plans_max_offers_non_negative'),
)

businesses = Table(
    'businesses',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('name', String(200), nullable=False),
    Column('owner_id', String(36), ForeignKey('users.id'), nullable=False, index=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # One business name per owner
    UniqueConstraint('owner_id', 'name', name='uq_businesses_owner_name'),
    Index('idx_businesses_created_at', 'created_at'),
)

subscriptions = Table(
    'subscriptions',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('business_id', String(36), ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, unique=True),
    Column('plan_id', String(36), ForeignKey('plans.id'), nullable=False, index=True),
    Column('status', String(20), nullable=False, index=True),
    Column('start_date', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('next_billing_date', DateTime(timezone=True), nullable=True),
    Column('trial_ends_at', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    CheckConstraint(
        "status IN ('TRIAL', 'ACTIVE', 'CANCELLED', 'PAST_DUE', 'EXPIRED', 'PENDING')",
        name='ck_subscriptions_status',
    ),
    Index('idx_subscriptions_updated_at', 'updated_at'),
)

# Marketplace listing snapshots (refreshed by the monitoring workers)
offer_snapshots = Table(
    'offer_snapshots',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('business_id', String(36), ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True),
    Column('title', Text, nullable=True),
    Column('selling_price', Float, nullable=True),
    Column('in_buy_box', Boolean, nullable=True),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
)

monitored_offers = Table(
    'monitored_offers',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('business_id', String(36), ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
    Column('snapshot_id', String(36), ForeignKey('offer_snapshots.id', ondelete='SET NULL'), nullable=True),
    Column('is_monitored', Boolean, nullable=False, server_default='0'),
    Column('min_price', Float, nullable=True),
    Column('last_monitored', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Grouped aggregation scans offers per business
    Index('idx_monitored_offers_business_monitored', 'business_id', 'is_monitored'),
    Index('idx_monitored_offers_business_created', 'business_id', 'created_at'),
)

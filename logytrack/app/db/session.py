"""
Database engine configuration.

This module handles database engine creation using SQLAlchemy with
async support. Sessions are not used: every repository call borrows one
connection from the engine for the duration of that call.
"""

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base
from logytrack.app.core.config import settings

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# Create declarative base for models
Base = declarative_base()

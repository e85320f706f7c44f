"""Base model for SQLAlchemy ORM."""

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models with async support."""
    pass


__all__ = ["Base"]

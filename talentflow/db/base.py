"""
SQLAlchemy declarative base.

This is the foundation for all database models.
All models inherit from this Base class.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.
    
    All tables (jobs, candidates, activities, templates, interviews)
    inherit from this class so Alembic sees a single metadata.
    """
    pass

"""
SQLAlchemy repository implementations.
"""
from .sqlalchemy_repository import PAGE_ORDERING, SQLAlchemyQuery, SQLAlchemyRepository

__all__ = [
    'PAGE_ORDERING',
    'SQLAlchemyQuery',
    'SQLAlchemyRepository',
]

"""
Relational store adapter (SQLAlchemy async).
"""
from .connection import (
    DatabaseManager,
    engine_options,
    get_unit_of_work,
    health_check,
    init_db,
)
from .session_context import SessionContext, is_transient_error
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    'DatabaseManager',
    'engine_options',
    'get_unit_of_work',
    'health_check',
    'init_db',
    'SessionContext',
    'is_transient_error',
    'SQLAlchemyUnitOfWork',
]

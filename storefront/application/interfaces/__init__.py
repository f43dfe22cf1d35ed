# Application Interfaces (Ports)
from .repositories import (
    DataRepository,
    Ordering,
    Page,
    Query,
    QueryState,
    require_entity,
    validate_paging,
)
from .unit_of_work import TransactionState, UnitOfWork

__all__ = [
    'DataRepository',
    'Ordering',
    'Page',
    'Query',
    'QueryState',
    'require_entity',
    'validate_paging',
    'TransactionState',
    'UnitOfWork',
]

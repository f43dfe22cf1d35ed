"""
Document store adapter (Azure Cosmos DB).
"""
from .client import CosmosManager
from .documents import DocumentMapper, to_camel, value_at_path
from .query_translator import CosmosQueryTranslator, CosmosStatement
from .repository import CosmosQuery, CosmosRepository

__all__ = [
    'CosmosManager',
    'DocumentMapper',
    'to_camel',
    'value_at_path',
    'CosmosQueryTranslator',
    'CosmosStatement',
    'CosmosQuery',
    'CosmosRepository',
]

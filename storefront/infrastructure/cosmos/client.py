"""
Azure Cosmos DB connection management.

One CosmosClient is shared by the whole process; container handles are
cached per container name.
"""
import logging
from typing import Dict, Iterable, Optional, Tuple

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.core.exceptions import ServiceRequestError, ServiceResponseError

from ...config import CosmosSettings, get_settings
from ...domain.exceptions import BackendUnavailableException

logger = logging.getLogger(__name__)


# Composite indexes backing the stable paging order (createdAt, id)
PAGING_INDEXING_POLICY = {
    'indexingMode': 'consistent',
    'includedPaths': [{'path': '/*'}],
    'excludedPaths': [{'path': '/"_etag"/?'}],
    'compositeIndexes': [
        [
            {'path': '/createdAt', 'order': 'ascending'},
            {'path': '/id', 'order': 'ascending'},
        ],
        [
            {'path': '/createdAt', 'order': 'descending'},
            {'path': '/id', 'order': 'descending'},
        ],
    ],
}


class CosmosManager:
    """
    Manages the Cosmos DB client and container handles.
    """

    _client: Optional[CosmosClient] = None
    _containers: Dict[str, ContainerProxy] = {}

    @classmethod
    def _settings(cls) -> CosmosSettings:
        return get_settings().cosmos

    @classmethod
    def get_client(cls) -> CosmosClient:
        """Get or create the Cosmos client."""
        if cls._client is None:
            settings = cls._settings()
            if not settings.is_configured:
                raise BackendUnavailableException(
                    backend='cosmos',
                    message='Cosmos DB is not configured (set COSMOS_CONNECTION_STRING or COSMOS_ENDPOINT and COSMOS_KEY)',
                )
            # Throttled (429) requests are retried inside the SDK
            retry_options = {
                'retry_total': settings.max_retry_attempts_on_rate_limit,
                'retry_backoff_max': settings.max_retry_wait_seconds,
            }
            if settings.connection_string:
                cls._client = CosmosClient.from_connection_string(
                    settings.connection_string,
                    **retry_options,
                )
            else:
                cls._client = CosmosClient(
                    settings.endpoint,
                    credential=settings.key,
                    **retry_options,
                )
            logger.info(f"Cosmos client created for database '{settings.database_name}'")
        return cls._client

    @classmethod
    def get_database(cls) -> DatabaseProxy:
        """Get the configured database handle."""
        return cls.get_client().get_database_client(cls._settings().database_name)

    @classmethod
    def get_container(cls, name: str) -> ContainerProxy:
        """Get a cached container handle."""
        if name not in cls._containers:
            cls._containers[name] = cls.get_database().get_container_client(name)
        return cls._containers[name]

    @classmethod
    async def initialize(cls, containers: Iterable[Tuple[str, str]]) -> None:
        """
        Create the database and containers if they do not exist yet.

        Args:
            containers: (container name, partition key path) pairs

        Throughput is only applied when a container is created.
        """
        settings = cls._settings()
        client = cls.get_client()
        try:
            database = await client.create_database_if_not_exists(id=settings.database_name)
            for name, partition_key_path in containers:
                container = await database.create_container_if_not_exists(
                    id=name,
                    partition_key=PartitionKey(path=partition_key_path),
                    indexing_policy=PAGING_INDEXING_POLICY,
                    offer_throughput=settings.throughput,
                )
                cls._containers[name] = container
                logger.info(f"Cosmos container '{name}' ready (partition key {partition_key_path})")
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            logger.error(f"Cosmos initialization failed: {e}")
            raise BackendUnavailableException(
                backend='cosmos',
                message='Could not initialize containers',
                original_error=str(e),
                status_code=getattr(e, 'status_code', None),
            ) from e

    @classmethod
    async def health_check(cls) -> bool:
        """Check that the configured database can be read."""
        try:
            await cls.get_database().read()
            return True
        except Exception as e:
            logger.warning(f"Cosmos health check failed: {e}")
            return False

    @classmethod
    async def close(cls) -> None:
        """Close the client and forget cached containers."""
        if cls._client is not None:
            await cls._client.close()
            cls._client = None
        cls._containers = {}

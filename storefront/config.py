"""
Runtime configuration, read from the environment (and an optional .env file).

Every group has its own prefix: DB_, COSMOS_, STORAGE_ and CORS_. The full
database URL may also be given as DATABASE_URL.
"""
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Backend = Literal['sql', 'cosmos']


def _env(prefix: str = '', **extra) -> SettingsConfigDict:
    return SettingsConfigDict(env_prefix=prefix, env_file='.env', extra='ignore', **extra)


class DatabaseSettings(BaseSettings):
    """Relational store connection and retry policy."""

    model_config = _env('DB_', populate_by_name=True)

    driver: str = Field(default='postgresql+asyncpg', description='SQLAlchemy async dialect+driver')
    host: str = 'localhost'
    port: int = 5432
    name: str = 'storefront'
    user: str = 'postgres'
    password: str = 'postgres'
    url_override: Optional[str] = Field(
        default=None,
        alias='DATABASE_URL',
        description='Complete SQLAlchemy URL; wins over the individual parts',
    )

    pool_size: int = 5
    max_overflow: int = 10
    echo_sql: bool = False

    max_retry_count: int = Field(default=3, ge=0, description='Retries after the first attempt')
    max_retry_delay: float = Field(default=30.0, ge=0, description='Longest single backoff, in seconds')

    @property
    def url(self) -> str:
        if self.url_override:
            return self.url_override
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class CosmosSettings(BaseSettings):
    """
    Azure Cosmos DB account, database and container layout.

    Either a connection string or an endpoint plus key is needed. Partition
    key paths are applied when a container is first created; changing them
    later has no effect on an existing container.
    """

    model_config = _env('COSMOS_')

    connection_string: Optional[str] = None
    endpoint: Optional[str] = None
    key: Optional[str] = None
    database_name: str = 'StorefrontDb'
    throughput: int = Field(default=400, description='Provisioned RU/s for new containers')

    max_retry_attempts_on_rate_limit: int = 3
    max_retry_wait_seconds: int = 30
    max_item_count: int = Field(default=100, description='Documents fetched per query page')

    products_container: str = 'Products'
    products_partition_key: str = '/id'
    customers_container: str = 'Customers'
    customers_partition_key: str = '/id'
    orders_container: str = 'Orders'
    orders_partition_key: str = '/id'

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string or (self.endpoint and self.key))


class StorageSettings(BaseSettings):
    """Backend ('sql' or 'cosmos') holding each entity."""

    model_config = _env('STORAGE_')

    products: Backend = 'sql'
    customers: Backend = 'sql'
    orders: Backend = 'sql'

    @property
    def backends(self) -> set:
        return {self.products, self.customers, self.orders}

    @property
    def uses_sql(self) -> bool:
        return 'sql' in self.backends

    @property
    def uses_cosmos(self) -> bool:
        return 'cosmos' in self.backends


class CORSSettings(BaseSettings):
    model_config = _env('CORS_')

    allowed_origins: List[str] = ['http://localhost:3000', 'http://localhost:5173']
    allow_credentials: bool = True
    allowed_methods: List[str] = ['*']
    allowed_headers: List[str] = ['*']


class AppSettings(BaseSettings):
    """Top-level settings; sub-groups read their own prefixed variables."""

    model_config = _env(env_file_encoding='utf-8')

    app_name: str = 'Storefront Data API'
    app_version: str = '1.0.0'
    debug: bool = False
    environment: str = 'development'

    host: str = '0.0.0.0'
    port: int = 8000
    workers: int = 1
    reload: bool = False

    api_prefix: str = '/api'
    log_level: str = 'INFO'

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    cosmos: CosmosSettings = Field(default_factory=CosmosSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Settings for the process, read once."""
    return AppSettings()

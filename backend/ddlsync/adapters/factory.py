"""
This module defines the `AdapterFactory`, which creates and caches the
connected catalog adapter (and therefore the connection pool) for a process.

Entry points call `get_or_create()` explicitly at start-up and pass the
returned adapter down to every operation. Repeated calls return the same
adapter; concurrent first calls are serialized by a single lock so only one
pool is ever created per connection target.
"""

import asyncio
import logging
from typing import Dict, Optional, Tuple

from ddlsync.adapters.base import CatalogAdapter
from ddlsync.adapters.oracle import OracleAdapter
from ddlsync.adapters.postgres import PostgresAdapter
from ddlsync.core import metrics
from ddlsync.core.config import Settings
from ddlsync.core.error_utils import truncate_error_message
from ddlsync.core.errors import PoolInitializationError
from ddlsync.core.retry import RetryPolicy

logger = logging.getLogger(__name__)


def create_adapter(settings: Settings) -> CatalogAdapter:
    """
    Builds an unconnected adapter for the configured dialect.

    Raises:
        ConfigurationError: If a required connection setting is empty.
    """
    settings.validate_connection()

    if settings.DB_DIALECT == "oracle":
        return OracleAdapter(
            user=settings.ORACLE_USER,
            password=settings.ORACLE_PASSWORD,
            dsn=settings.ORACLE_CONNECT_STRING,
            pool_min=settings.ORACLE_POOL_MIN,
            pool_max=settings.ORACLE_POOL_MAX,
            pool_increment=settings.ORACLE_POOL_INCREMENT,
        )
    if settings.DB_DIALECT == "postgres":
        return PostgresAdapter(
            settings.POSTGRES_URL,
            schema=settings.POSTGRES_SCHEMA,
            pool_min_size=settings.POSTGRES_POOL_MIN_SIZE,
            pool_max_size=settings.POSTGRES_POOL_MAX_SIZE,
        )
    raise ValueError(f"Unsupported database dialect: '{settings.DB_DIALECT}'")


def _target_key(settings: Settings) -> Tuple[str, str]:
    if settings.DB_DIALECT == "oracle":
        return ("oracle", f"{settings.ORACLE_USER}@{settings.ORACLE_CONNECT_STRING}")
    return ("postgres", settings.POSTGRES_URL)


class AdapterFactory:
    """
    Creates, connects and caches catalog adapters keyed by connection target.

    Pool creation goes through one `RetryPolicy`; no other database call is
    retried.
    """

    def __init__(self, retry_policy: Optional[RetryPolicy] = None, adapter_builder=create_adapter):
        self.retry_policy = retry_policy
        self._adapter_builder = adapter_builder
        self._adapters: Dict[Tuple[str, str], CatalogAdapter] = {}
        self._lock = asyncio.Lock()

    async def get_or_create(self, settings: Settings) -> CatalogAdapter:
        """
        Returns the connected adapter for ``settings``, creating it if absent.

        Raises:
            ConfigurationError: If a required connection setting is empty.
            PoolInitializationError: If every pool creation attempt failed.
        """
        key = _target_key(settings)
        async with self._lock:
            existing = self._adapters.get(key)
            if existing is not None and existing.is_connected:
                logger.info("Reusing existing database pool")
                return existing

            adapter = self._adapter_builder(settings)
            policy = self.retry_policy or RetryPolicy.from_settings(settings)
            logger.info(
                f"Creating {adapter.dialect} connection pool "
                f"(up to {policy.max_attempts} attempts)"
            )
            try:
                await policy.call(self._connect, adapter)
            except Exception as e:
                raise PoolInitializationError(
                    f"Database initialization failed: {truncate_error_message(e)}",
                    dialect=adapter.dialect,
                    attempts=policy.max_attempts,
                ) from e

            self._adapters[key] = adapter
            logger.info(f"{adapter.dialect} database pool created successfully")
            return adapter

    @staticmethod
    async def _connect(adapter: CatalogAdapter) -> None:
        try:
            await adapter.connect()
        except Exception:
            metrics.pool_connect_attempts_total.labels(
                dialect=adapter.dialect, status="error"
            ).inc()
            raise
        metrics.pool_connect_attempts_total.labels(
            dialect=adapter.dialect, status="success"
        ).inc()

    async def shutdown(self) -> None:
        """Disconnects every cached adapter and clears the cache."""
        async with self._lock:
            for key, adapter in self._adapters.items():
                try:
                    await asyncio.wait_for(adapter.disconnect(), timeout=5.0)
                except asyncio.TimeoutError:
                    logger.warning(f"Timeout closing {key[0]} pool")
                except Exception as e:
                    logger.error(
                        f"Failed to close {key[0]} pool: {truncate_error_message(e)}"
                    )
            self._adapters.clear()

from ddlsync.adapters.base import CatalogAdapter
from ddlsync.adapters.oracle import OracleAdapter
from ddlsync.adapters.postgres import PostgresAdapter
from ddlsync.adapters.factory import AdapterFactory, create_adapter

__all__ = [
    "CatalogAdapter",
    "OracleAdapter",
    "PostgresAdapter",
    "AdapterFactory",
    "create_adapter",
]

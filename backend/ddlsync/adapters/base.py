"""Base catalog adapter interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class CatalogAdapter(ABC):
    """Abstract base class for database adapters.

    An adapter owns one connection pool. Every call to :meth:`execute` or
    :meth:`execute_ddl` borrows a connection, runs one statement and releases
    the connection before returning, on success and on error alike.
    """

    dialect: str = ""

    # Catalog queries keyed by name: tables, columns, primary_key,
    # foreign_keys, uniques, checks, indexes, index_columns
    CATALOG_QUERIES: Dict[str, str] = {}

    @abstractmethod
    async def connect(self) -> None:
        """Create the connection pool and verify it with a trivial query"""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection pool"""
        pass

    @abstractmethod
    async def execute(
        self, query: str, params: Optional[Any] = None
    ) -> List[Dict[str, Any]]:
        """Execute a bound query and return rows as field-name mappings"""
        pass

    @abstractmethod
    async def execute_ddl(self, sql: str) -> None:
        """Execute a single DDL statement"""
        pass

    @abstractmethod
    def is_already_exists(self, error: BaseException) -> bool:
        """True if ``error`` is the engine's duplicate-object signal"""
        pass

    @abstractmethod
    def tables_params(self, pattern: str) -> Any:
        """Bind parameters for the ``tables`` query (a LIKE pattern)"""
        pass

    @abstractmethod
    def table_params(self, table: str) -> Any:
        """Bind parameters for the per-table catalog queries"""
        pass

    @property
    def is_connected(self) -> bool:
        return getattr(self, "pool", None) is not None

    def catalog_query(self, name: str) -> str:
        try:
            return self.CATALOG_QUERIES[name]
        except KeyError:
            raise ValueError(
                f"No catalog query '{name}' for dialect '{self.dialect}'"
            ) from None

"""
This module provides a PostgreSQL catalog adapter.

It includes the `PostgresAdapter` class, which implements the `CatalogAdapter`
interface for reading table metadata from `information_schema` and
`pg_catalog` and for executing DDL. The adapter uses the `asyncpg` library
for asynchronous database operations and connection pooling.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import asyncpg  # type: ignore[import-untyped]

from ddlsync.adapters.base import CatalogAdapter

logger = logging.getLogger(__name__)

# duplicate_table, duplicate_object, duplicate_schema, duplicate_column
ALREADY_EXISTS_SQLSTATES = frozenset({"42P07", "42710", "42P06", "42701"})


class PostgresAdapter(CatalogAdapter):
    """
    PostgreSQL database adapter.

    This class manages a connection pool to a PostgreSQL database. Catalog
    queries are restricted to one schema (``public`` unless configured).
    """

    dialect = "postgres"

    CATALOG_QUERIES: Dict[str, str] = {
        "tables": """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = $1
            AND table_type = 'BASE TABLE'
            AND table_name LIKE $2 ESCAPE '\\'
            ORDER BY table_name COLLATE "C"
        """,
        "columns": """
            SELECT
                column_name,
                CASE WHEN data_type IN ('USER-DEFINED', 'ARRAY')
                    THEN udt_name ELSE data_type END AS data_type,
                character_octet_length AS data_length,
                numeric_precision AS data_precision,
                numeric_scale AS data_scale,
                is_nullable AS nullable,
                column_default AS data_default,
                ordinal_position AS column_id,
                character_maximum_length AS char_length
            FROM information_schema.columns
            WHERE table_schema = $1 AND table_name = $2
            ORDER BY ordinal_position
        """,
        "primary_key": """
            SELECT
                kcu.column_name,
                tc.constraint_name,
                kcu.ordinal_position AS position
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.table_schema = $1 AND tc.table_name = $2
            AND tc.constraint_type = 'PRIMARY KEY'
            ORDER BY kcu.ordinal_position
        """,
        "foreign_keys": """
            SELECT
                con.conname AS constraint_name,
                att.attname AS column_name,
                ref_cls.relname AS referenced_table,
                ref_att.attname AS referenced_column,
                k.ord AS position,
                CASE con.confdeltype
                    WHEN 'c' THEN 'CASCADE'
                    WHEN 'n' THEN 'SET NULL'
                    WHEN 'd' THEN 'SET DEFAULT'
                    WHEN 'r' THEN 'RESTRICT'
                    ELSE 'NO ACTION'
                END AS delete_rule
            FROM pg_constraint con
            JOIN pg_class cls ON cls.oid = con.conrelid
            JOIN pg_namespace nsp ON nsp.oid = cls.relnamespace
            JOIN pg_class ref_cls ON ref_cls.oid = con.confrelid
            CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
                WITH ORDINALITY AS k(attnum, ref_attnum, ord)
            JOIN pg_attribute att
                ON att.attrelid = con.conrelid AND att.attnum = k.attnum
            JOIN pg_attribute ref_att
                ON ref_att.attrelid = con.confrelid AND ref_att.attnum = k.ref_attnum
            WHERE con.contype = 'f' AND nsp.nspname = $1 AND cls.relname = $2
            ORDER BY con.conname, k.ord
        """,
        "uniques": """
            SELECT
                kcu.column_name,
                tc.constraint_name,
                kcu.ordinal_position AS position
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.table_schema = $1 AND tc.table_name = $2
            AND tc.constraint_type = 'UNIQUE'
            ORDER BY tc.constraint_name, kcu.ordinal_position
        """,
        "checks": """
            SELECT
                con.conname AS constraint_name,
                pg_get_expr(con.conbin, con.conrelid) AS search_condition
            FROM pg_constraint con
            JOIN pg_class cls ON cls.oid = con.conrelid
            JOIN pg_namespace nsp ON nsp.oid = cls.relnamespace
            WHERE con.contype = 'c' AND nsp.nspname = $1 AND cls.relname = $2
            ORDER BY con.conname
        """,
        "indexes": """
            SELECT
                idx.relname AS index_name,
                CASE WHEN ix.indisunique THEN 'UNIQUE' ELSE 'NONUNIQUE' END AS uniqueness,
                am.amname AS index_type
            FROM pg_index ix
            JOIN pg_class tbl ON tbl.oid = ix.indrelid
            JOIN pg_namespace nsp ON nsp.oid = tbl.relnamespace
            JOIN pg_class idx ON idx.oid = ix.indexrelid
            JOIN pg_am am ON am.oid = idx.relam
            WHERE nsp.nspname = $1 AND tbl.relname = $2
            AND am.amname = 'btree'
            AND ix.indexprs IS NULL
            AND NOT EXISTS (
                SELECT 1 FROM pg_constraint con
                WHERE con.conindid = ix.indexrelid
                AND con.contype IN ('p', 'u', 'x')
            )
            ORDER BY idx.relname
        """,
        "index_columns": """
            SELECT
                idx.relname AS index_name,
                att.attname AS column_name,
                k.ord AS column_position
            FROM pg_index ix
            JOIN pg_class tbl ON tbl.oid = ix.indrelid
            JOIN pg_namespace nsp ON nsp.oid = tbl.relnamespace
            JOIN pg_class idx ON idx.oid = ix.indexrelid
            CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
            JOIN pg_attribute att
                ON att.attrelid = tbl.oid AND att.attnum = k.attnum
            WHERE nsp.nspname = $1 AND tbl.relname = $2
            AND k.ord <= ix.indnkeyatts
            ORDER BY idx.relname, k.ord
        """,
    }

    def __init__(
        self,
        connection_string: str,
        schema: str = "public",
        pool_min_size: int = 1,
        pool_max_size: int = 10,
    ):
        """
        Initializes the PostgresAdapter.

        Args:
            connection_string: The connection string for the PostgreSQL database.
            schema: Schema whose tables are analyzed.
            pool_min_size: Minimum pooled connections.
            pool_max_size: Maximum pooled connections.
        """
        self.connection_string = connection_string
        self.schema = schema
        self.pool_min_size = pool_min_size
        self.pool_max_size = pool_max_size
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        """
        Creates and establishes the connection pool to the database.

        The statement cache is disabled for compatibility with connection
        poolers; DDL changes relation definitions under cached plans anyway.
        """
        try:
            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.pool_min_size,
                max_size=self.pool_max_size,
                command_timeout=60,
                timeout=10,
                statement_cache_size=0,
            )
            await self.pool.fetchval("SELECT 1")
            logger.debug(
                f"PostgreSQL connection pool created (min={self.pool_min_size}, max={self.pool_max_size})"
            )
        except (asyncio.TimeoutError, TimeoutError) as e:
            logger.warning(
                "PostgreSQL connection pool creation timed out: %s", e
            )
            await self._discard_pool()
            raise
        except Exception as e:
            logger.error("Failed to create PostgreSQL connection pool: %s", e)
            await self._discard_pool()
            raise

    async def _discard_pool(self) -> None:
        if self.pool is not None:
            self.pool.terminate()
            self.pool = None

    async def disconnect(self) -> None:
        """Closes the connection pool and terminates all database connections."""
        if self.pool is None:
            logger.info("No database pool to close")
            return
        try:
            await asyncio.wait_for(self.pool.close(), timeout=2.0)
            logger.info("Database pool closed successfully")
        except asyncio.TimeoutError:
            logger.warning("PostgreSQL pool close timed out, forcing close")
            self.pool.terminate()
        finally:
            self.pool = None

    async def execute(
        self, query: str, params: Optional[Any] = None
    ) -> List[Dict[str, Any]]:
        """
        Executes a SQL query and returns the results.

        Args:
            query: The SQL query string to execute.
            params: Positional parameters for ``$n`` placeholders.

        Returns:
            A list of dictionaries, where each dictionary represents a result row.
        """
        assert self.pool is not None, "connect() must be called first"
        async with self.pool.acquire() as conn:
            if params:
                rows = await conn.fetch(query, *params)
            else:
                rows = await conn.fetch(query)
        return [dict(row) for row in rows]

    async def execute_ddl(self, sql: str) -> None:
        assert self.pool is not None, "connect() must be called first"
        async with self.pool.acquire() as conn:
            await conn.execute(sql)

    def is_already_exists(self, error: BaseException) -> bool:
        return getattr(error, "sqlstate", None) in ALREADY_EXISTS_SQLSTATES

    def tables_params(self, pattern: str) -> List[Any]:
        return [self.schema, pattern]

    def table_params(self, table: str) -> List[Any]:
        return [self.schema, table]

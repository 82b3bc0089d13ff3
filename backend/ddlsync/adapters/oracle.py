"""
This module provides the Oracle catalog adapter.

`OracleAdapter` implements the `CatalogAdapter` interface on top of the
asyncio API of `python-oracledb` (thin mode). It reads the current user's
data dictionary views (`user_tables`, `user_tab_columns`, `user_constraints`,
`user_cons_columns`, `user_indexes`, `user_ind_columns`) and executes DDL for
migration runs.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import oracledb

from ddlsync.adapters.base import CatalogAdapter

logger = logging.getLogger(__name__)

# CLOB/NCLOB values come back as str instead of LOB locators
oracledb.defaults.fetch_lobs = False

_ORA_CODE = re.compile(r"\bORA-(\d{5})\b")

# name is already used by an existing object; table can have only one
# primary key; duplicate UNIQUE/PRIMARY KEY; duplicate CHECK constraint;
# such a referential constraint already exists; such column list already indexed
ALREADY_EXISTS_CODES = frozenset({955, 2260, 2261, 2264, 2275, 1408})


class OracleAdapter(CatalogAdapter):
    """
    Oracle database adapter.

    Holds one `oracledb.AsyncConnectionPool`. Connections are acquired per
    statement and returned to the pool as soon as the statement finishes.
    """

    dialect = "oracle"

    CATALOG_QUERIES: Dict[str, str] = {
        "tables": """
            SELECT table_name
            FROM user_tables
            WHERE table_name LIKE :pattern ESCAPE '\\'
            ORDER BY table_name
        """,
        "columns": """
            SELECT
                column_name,
                data_type,
                data_length,
                data_precision,
                data_scale,
                nullable,
                data_default,
                column_id,
                char_length,
                char_used
            FROM user_tab_columns
            WHERE table_name = :table_name
            ORDER BY column_id
        """,
        "primary_key": """
            SELECT
                cols.column_name,
                cons.constraint_name,
                cols.position
            FROM user_cons_columns cols
            JOIN user_constraints cons
                ON cols.constraint_name = cons.constraint_name
                AND cols.table_name = cons.table_name
            WHERE cons.table_name = :table_name
            AND cons.constraint_type = 'P'
            ORDER BY cols.position
        """,
        "foreign_keys": """
            SELECT
                cols.column_name,
                cons.constraint_name,
                cons.delete_rule,
                cols.position,
                ref_cons.table_name AS referenced_table,
                ref_cols.column_name AS referenced_column
            FROM user_cons_columns cols
            JOIN user_constraints cons
                ON cols.constraint_name = cons.constraint_name
                AND cols.table_name = cons.table_name
            JOIN user_constraints ref_cons
                ON cons.r_constraint_name = ref_cons.constraint_name
            JOIN user_cons_columns ref_cols
                ON ref_cols.constraint_name = ref_cons.constraint_name
                AND ref_cols.position = cols.position
            WHERE cons.table_name = :table_name
            AND cons.constraint_type = 'R'
            ORDER BY cons.constraint_name, cols.position
        """,
        "uniques": """
            SELECT
                cols.column_name,
                cons.constraint_name,
                cols.position
            FROM user_cons_columns cols
            JOIN user_constraints cons
                ON cols.constraint_name = cons.constraint_name
                AND cols.table_name = cons.table_name
            WHERE cons.table_name = :table_name
            AND cons.constraint_type = 'U'
            ORDER BY cons.constraint_name, cols.position
        """,
        "checks": """
            SELECT
                constraint_name,
                search_condition
            FROM user_constraints
            WHERE table_name = :table_name
            AND constraint_type = 'C'
            ORDER BY constraint_name
        """,
        "indexes": """
            SELECT
                index_name,
                uniqueness,
                index_type
            FROM user_indexes
            WHERE table_name = :table_name
            AND index_type = 'NORMAL'
            AND index_name NOT IN (
                SELECT index_name
                FROM user_constraints
                WHERE table_name = :table_name
                AND index_name IS NOT NULL
            )
            ORDER BY index_name
        """,
        "index_columns": """
            SELECT
                index_name,
                column_name,
                column_position
            FROM user_ind_columns
            WHERE table_name = :table_name
            ORDER BY index_name, column_position
        """,
    }

    def __init__(
        self,
        user: str,
        password: str,
        dsn: str,
        pool_min: int = 2,
        pool_max: int = 10,
        pool_increment: int = 1,
    ):
        """
        Initializes the OracleAdapter.

        Args:
            user: Schema owner whose dictionary views are read.
            password: Password for ``user``.
            dsn: Oracle connect string (``host:port/service`` or a TNS alias).
            pool_min: Minimum pooled connections.
            pool_max: Maximum pooled connections.
            pool_increment: Connections opened when the pool grows.
        """
        self.user = user
        self.password = password
        self.dsn = dsn
        self.pool_min = pool_min
        self.pool_max = pool_max
        self.pool_increment = pool_increment
        self.pool: Optional[oracledb.AsyncConnectionPool] = None

    async def connect(self) -> None:
        """Creates the pool and runs ``SELECT 1 FROM DUAL`` on it."""
        pool = oracledb.create_pool_async(
            user=self.user,
            password=self.password,
            dsn=self.dsn,
            min=self.pool_min,
            max=self.pool_max,
            increment=self.pool_increment,
        )
        try:
            async with pool.acquire() as connection:
                with connection.cursor() as cursor:
                    await cursor.execute("SELECT 1 FROM DUAL")
                    await cursor.fetchone()
        except Exception:
            await pool.close(force=True)
            raise

        self.pool = pool
        logger.debug(
            f"Oracle connection pool created (min={self.pool_min}, max={self.pool_max})"
        )

    async def disconnect(self) -> None:
        """Closes the pool; a missing pool is not an error."""
        if self.pool is None:
            logger.info("No database pool to close")
            return
        try:
            await self.pool.close(force=True)
            logger.info("Database pool closed successfully")
        finally:
            self.pool = None

    async def execute(
        self, query: str, params: Optional[Any] = None
    ) -> List[Dict[str, Any]]:
        """
        Executes a bound query and returns rows keyed by the catalog's
        (uppercase) column names.
        """
        assert self.pool is not None, "connect() must be called first"
        async with self.pool.acquire() as connection:
            with connection.cursor() as cursor:
                await cursor.execute(query, params or {})
                if cursor.description is None:
                    return []
                columns = [desc[0] for desc in cursor.description]
                rows = await cursor.fetchall()
        return [dict(zip(columns, row)) for row in rows]

    async def execute_ddl(self, sql: str) -> None:
        assert self.pool is not None, "connect() must be called first"
        async with self.pool.acquire() as connection:
            with connection.cursor() as cursor:
                await cursor.execute(sql)

    def is_already_exists(self, error: BaseException) -> bool:
        code = _oracle_error_code(error)
        return code in ALREADY_EXISTS_CODES

    def tables_params(self, pattern: str) -> Dict[str, Any]:
        return {"pattern": pattern}

    def table_params(self, table: str) -> Dict[str, Any]:
        return {"table_name": table}


def _oracle_error_code(error: BaseException) -> Optional[int]:
    """Extract the ORA- error number from a python-oracledb exception."""
    if error.args:
        code = getattr(error.args[0], "code", None)
        if isinstance(code, int) and code:
            return code
    match = _ORA_CODE.search(str(error))
    if match:
        return int(match.group(1))
    return None

"""
Catalog reader: turns a live database's data dictionary into a
`SchemaSnapshot`.

Tables are described one at a time, and each catalog query borrows its own
pooled connection. There is therefore no transactional snapshot across the
queries that describe one table: a schema change made while the analysis is
running (an index dropped, a constraint added) can leave the snapshot with
an inconsistent cross-section. This is an accepted best-effort window for an
administrative tool; re-run the analysis if the source schema was changing.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Type

from ddlsync.adapters.base import CatalogAdapter
from ddlsync.core import metrics
from ddlsync.core.error_utils import truncate_error_message
from ddlsync.core.errors import CatalogReadError
from ddlsync.models.catalog import (CatalogRow, CheckRow, ColumnRow,
                                    ForeignKeyRow, IndexColumnRow, IndexRow,
                                    KeyColumnRow, TableCatalogRows, TableRow)
from ddlsync.models.schema import SchemaSnapshot, TableSchema
from ddlsync.services.dialects import rules_for
from ddlsync.services.schema_builder import (IndexColumnSource,
                                             build_snapshot,
                                             build_table_schema)

logger = logging.getLogger(__name__)

# Per-table catalog queries and the record each row decodes into
TABLE_QUERIES: Dict[str, Type[CatalogRow]] = {
    "columns": ColumnRow,
    "primary_key": KeyColumnRow,
    "foreign_keys": ForeignKeyRow,
    "uniques": KeyColumnRow,
    "checks": CheckRow,
    "indexes": IndexRow,
    "index_columns": IndexColumnRow,
}


def like_prefix_pattern(prefix: str) -> str:
    """LIKE pattern matching names that start with ``prefix`` literally."""
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


class CatalogReader:
    """
    Reads table metadata through a connected `CatalogAdapter`.

    Any failed catalog query raises `CatalogReadError`; a partially described
    table is never returned.
    """

    def __init__(
        self,
        adapter: CatalogAdapter,
        index_column_source: IndexColumnSource = "catalog",
        progress=None,
    ):
        self.adapter = adapter
        self.rules = rules_for(adapter.dialect)
        self.index_column_source = index_column_source
        self._progress = progress or (lambda message: logger.info(message))

    async def _query(
        self, name: str, params: Any, table: Optional[str] = None
    ) -> List[Mapping[str, Any]]:
        dialect = self.adapter.dialect
        started = time.perf_counter()
        try:
            rows = await self.adapter.execute(self.adapter.catalog_query(name), params)
        except Exception as e:
            metrics.catalog_queries_total.labels(dialect=dialect, query=name, status="error").inc()
            target = f" for table {table}" if table else ""
            logger.error(f"Catalog query '{name}' failed{target}: {truncate_error_message(e)}")
            raise CatalogReadError(
                f"Catalog query '{name}' failed{target}: {truncate_error_message(e)}",
                table=table,
                query=name,
            ) from e
        metrics.catalog_queries_total.labels(dialect=dialect, query=name, status="success").inc()
        metrics.catalog_query_duration_seconds.labels(dialect=dialect, query=name).observe(
            time.perf_counter() - started
        )
        return rows

    async def list_tables(self, prefix: str) -> List[str]:
        """User tables whose name starts with ``prefix``, in lexicographic order."""
        self._progress(f"Getting all {prefix}* tables...")
        rows = await self._query("tables", self.adapter.tables_params(like_prefix_pattern(prefix)))
        try:
            names = [row.table_name for row in TableRow.decode_all(rows)]
        except ValueError as e:
            raise CatalogReadError(f"Malformed table list: {e}", query="tables") from e
        tables = sorted(name for name in names if name.startswith(prefix))
        self._progress(f"Found {len(tables)} {prefix}* tables")
        return tables

    async def fetch_table_rows(self, name: str) -> TableCatalogRows:
        """Runs every per-table catalog query and decodes the rows."""
        params = self.adapter.table_params(name)
        decoded: Dict[str, List[CatalogRow]] = {}
        for query_name, record in TABLE_QUERIES.items():
            rows = await self._query(query_name, params, table=name)
            try:
                decoded[query_name] = record.decode_all(rows)
            except ValueError as e:
                raise CatalogReadError(
                    f"Malformed '{query_name}' rows for table {name}: {e}",
                    table=name,
                    query=query_name,
                ) from e
        return TableCatalogRows(table_name=name, **decoded)

    async def describe_table(self, name: str) -> TableSchema:
        """Full schema of one table."""
        self._progress(f"Analyzing table: {name}")
        rows = await self.fetch_table_rows(name)
        table = build_table_schema(rows, self.rules, self.index_column_source)
        metrics.tables_analyzed_total.labels(dialect=self.adapter.dialect).inc()

        self._progress(f"   {name}: {len(table.columns)} columns")
        if table.primary_key:
            self._progress(f"   Primary Key: {', '.join(table.primary_key.columns)}")
        if table.foreign_keys:
            self._progress(f"   Foreign Keys: {len(table.foreign_keys)} constraints")
        if table.uniques:
            self._progress(f"   Unique Constraints: {len(table.uniques)} constraints")
        if table.checks:
            self._progress(f"   Check Constraints: {len(table.checks)} constraints")
        if table.indexes:
            self._progress(f"   Indexes: {len(table.indexes)} indexes")
        return table

    async def read_snapshot(self, prefix: str) -> SchemaSnapshot:
        """Describes every matching table, sequentially."""
        tables = [await self.describe_table(name) for name in await self.list_tables(prefix)]
        return build_snapshot(self.adapter.dialect, prefix, tables)

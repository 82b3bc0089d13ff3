"""
Pure transforms from decoded catalog rows to `TableSchema` records.

Nothing here performs I/O. Rows always come from the catalog reader's own
queries, so a malformed row (unknown nullability flag, duplicate column
position) is a programming error and raises `ValueError`.
"""

import re
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, TypeVar, Union

from ddlsync.models.catalog import (CheckRow, ColumnRow, ForeignKeyRow,
                                    IndexColumnRow, IndexRow, KeyColumnRow,
                                    TableCatalogRows)
from ddlsync.models.schema import (CheckConstraintDef, ColumnDef,
                                   DataTypeKind, ForeignKeyDef, IndexDef,
                                   PrimaryKeyDef, SchemaSnapshot, TableSchema,
                                   UniqueConstraintDef)
from ddlsync.services.dialects import DialectRules

IndexColumnSource = Literal["catalog", "name"]

_NOT_NULL_CHECK = re.compile(r'^\s*"?([^"\s]+)"?\s+IS\s+NOT\s+NULL\s*$', re.IGNORECASE)

_TRUE_FLAGS = {"Y", "YES", "TRUE"}
_FALSE_FLAGS = {"N", "NO", "FALSE"}

K = TypeVar("K", KeyColumnRow, ForeignKeyRow)


def normalize_nullable(value: Union[str, bool]) -> bool:
    """Map catalog nullability flags ('Y'/'N', 'YES'/'NO', bool) to bool."""
    if isinstance(value, bool):
        return value
    flag = value.strip().upper()
    if flag in _TRUE_FLAGS:
        return True
    if flag in _FALSE_FLAGS:
        return False
    raise ValueError(f"Unrecognized nullability flag: {value!r}")


def normalize_default(value: Optional[str]) -> Optional[str]:
    """Strip catalog padding; an all-blank default means no default."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def build_columns(rows: Iterable[ColumnRow], rules: DialectRules) -> List[ColumnDef]:
    """Columns sorted by ordinal position, whatever order the rows came in."""
    ordered = sorted(rows, key=lambda row: row.column_id)
    positions = [row.column_id for row in ordered]
    if len(set(positions)) != len(positions):
        raise ValueError(f"Duplicate column positions in catalog rows: {positions}")

    columns = []
    for row in ordered:
        kind = rules.classify(row.data_type)
        if kind == DataTypeKind.CHARACTER:
            length = row.char_length or (
                row.data_length if rules.length_falls_back_to_bytes else None
            )
        else:
            length = row.data_length
        columns.append(
            ColumnDef(
                name=row.column_name,
                data_type=row.data_type,
                kind=kind,
                ordinal_position=row.column_id,
                length=length,
                precision=row.data_precision,
                scale=row.data_scale,
                nullable=normalize_nullable(row.nullable),
                default_expression=normalize_default(row.data_default),
            )
        )
    return columns


def _group_by_constraint(rows: Iterable[K]) -> "OrderedDict[str, List[K]]":
    groups: "OrderedDict[str, List[K]]" = OrderedDict()
    for row in rows:
        groups.setdefault(row.constraint_name, []).append(row)
    for name, members in groups.items():
        groups[name] = sorted(
            members, key=lambda r: r.position if r.position is not None else 0
        )
    return groups


def build_primary_key(rows: List[KeyColumnRow]) -> Optional[PrimaryKeyDef]:
    if not rows:
        return None
    groups = _group_by_constraint(rows)
    if len(groups) > 1:
        raise ValueError(f"More than one primary key constraint: {list(groups)}")
    name, members = next(iter(groups.items()))
    return PrimaryKeyDef(constraint_name=name, columns=[r.column_name for r in members])


def build_foreign_keys(rows: List[ForeignKeyRow]) -> List[ForeignKeyDef]:
    foreign_keys = []
    for name, members in _group_by_constraint(rows).items():
        foreign_keys.append(
            ForeignKeyDef(
                constraint_name=name,
                columns=[r.column_name for r in members],
                referenced_table=members[0].referenced_table,
                referenced_columns=[r.referenced_column for r in members],
                on_delete=(members[0].delete_rule or "NO ACTION").upper(),
            )
        )
    return foreign_keys


def build_uniques(rows: List[KeyColumnRow]) -> List[UniqueConstraintDef]:
    return [
        UniqueConstraintDef(constraint_name=name, columns=[r.column_name for r in members])
        for name, members in _group_by_constraint(rows).items()
    ]


def build_checks(rows: List[CheckRow], columns: List[ColumnDef]) -> List[CheckConstraintDef]:
    """
    Check constraints with their predicate kept verbatim.

    Oracle stores every NOT NULL column as a system check ``"COL" IS NOT NULL``;
    those are already rendered as the column's NOT NULL and are dropped here.
    """
    not_null_columns = {c.name for c in columns if not c.nullable}
    checks = []
    for row in rows:
        predicate = row.search_condition if row.search_condition is not None else ""
        match = _NOT_NULL_CHECK.match(predicate)
        if match and match.group(1) in not_null_columns:
            continue
        checks.append(CheckConstraintDef(constraint_name=row.constraint_name, predicate=predicate.strip()))
    return checks


def derive_index_columns_from_name(index_name: str, table_name: str) -> str:
    """
    Legacy derivation: drop the ``<table>_`` prefix and the ``_IDX`` suffix.

    Only correct for indexes named ``<table>_<columns>_IDX``.
    """
    return index_name.replace(f"{table_name}_", "", 1).replace("_IDX", "", 1)


def _is_unique(value: Union[str, bool]) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().upper() == "UNIQUE"


def build_indexes(
    table_name: str,
    rows: List[IndexRow],
    column_rows: List[IndexColumnRow],
    source: IndexColumnSource = "catalog",
) -> List[IndexDef]:
    columns_by_index: Dict[str, List[IndexColumnRow]] = {}
    for row in column_rows:
        columns_by_index.setdefault(row.index_name, []).append(row)

    indexes = []
    for row in rows:
        catalog_columns = sorted(
            columns_by_index.get(row.index_name, []), key=lambda r: r.column_position
        )
        if source == "catalog" and catalog_columns:
            columns = [r.column_name for r in catalog_columns]
            columns_source: IndexColumnSource = "catalog"
        else:
            columns = [derive_index_columns_from_name(row.index_name, table_name)]
            columns_source = "name"
        indexes.append(
            IndexDef(
                name=row.index_name,
                is_unique=_is_unique(row.uniqueness),
                columns=columns,
                columns_source=columns_source,
            )
        )
    return indexes


def build_table_schema(
    rows: TableCatalogRows,
    rules: DialectRules,
    index_column_source: IndexColumnSource = "catalog",
) -> TableSchema:
    """Assemble one `TableSchema` from everything the reader fetched for it."""
    columns = build_columns(rows.columns, rules)
    return TableSchema(
        name=rows.table_name,
        columns=columns,
        primary_key=build_primary_key(rows.primary_key),
        foreign_keys=build_foreign_keys(rows.foreign_keys),
        uniques=build_uniques(rows.uniques),
        checks=build_checks(rows.checks, columns),
        indexes=build_indexes(
            rows.table_name, rows.indexes, rows.index_columns, index_column_source
        ),
    )


def build_snapshot(
    dialect: str,
    table_prefix: str,
    tables: Iterable[TableSchema],
    captured_at: Optional[datetime] = None,
) -> SchemaSnapshot:
    """Snapshot with tables in lexicographic name order."""
    ordered = sorted(tables, key=lambda t: t.name)
    return SchemaSnapshot(
        dialect=dialect,
        table_prefix=table_prefix,
        captured_at=captured_at or datetime.now().astimezone(),
        tables={t.name: t for t in ordered},
    )

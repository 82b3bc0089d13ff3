"""
Deterministic rendering of `TableSchema` records into DDL text.

Output is a pure function of the input: the same snapshot always produces
byte-identical statements, which keeps audit artifacts diffable between runs.
SQL semantics are not validated; whatever the catalog held is rendered
literally and only fails when executed.
"""

from typing import Dict

from ddlsync.models.schema import (ColumnDef, DataTypeKind, ForeignKeyDef,
                                   IndexDef, SchemaSnapshot, SynthesizedDDL,
                                   TableSchema)
from ddlsync.services.dialects import DialectRules, rules_for


def size_suffix(column: ColumnDef) -> str:
    """Parenthesized size for the column's type kind, or '' when none applies."""
    if column.kind in (DataTypeKind.CHARACTER, DataTypeKind.BINARY):
        return f"({column.length})" if column.length else ""
    if column.kind == DataTypeKind.NUMERIC and column.precision:
        if column.scale:
            return f"({column.precision},{column.scale})"
        return f"({column.precision})"
    # datetime, large objects and everything else never take a size
    return ""


def render_column(column: ColumnDef, rules: DialectRules) -> str:
    definition = f"{column.name} {column.data_type}{size_suffix(column)}"
    if not column.nullable:
        definition += " NOT NULL"
    if column.default_expression and not rules.is_identity_default(column.default_expression):
        definition += f" DEFAULT {column.default_expression}"
    return definition


def render_create_table(table: TableSchema, rules: DialectRules) -> str:
    """
    CREATE TABLE with columns in ordinal order followed by the table-level
    clauses: primary key, then unique constraints, then check constraints.
    Foreign keys are never inlined.
    """
    clauses = [render_column(column, rules) for column in table.columns]

    if table.primary_key and table.primary_key.columns:
        clauses.append(f"PRIMARY KEY ({', '.join(table.primary_key.columns)})")

    for unique in table.uniques:
        clauses.append(
            f"CONSTRAINT {unique.constraint_name} UNIQUE ({', '.join(unique.columns)})"
        )

    for check in table.checks:
        clauses.append(f"CONSTRAINT {check.constraint_name} CHECK ({check.predicate})")

    body = ",\n".join(f"  {clause}" for clause in clauses)
    return f"CREATE TABLE {table.name} (\n{body}\n)"


def render_foreign_key(table_name: str, fk: ForeignKeyDef) -> str:
    sql = (
        f"ALTER TABLE {table_name} ADD CONSTRAINT {fk.constraint_name} "
        f"FOREIGN KEY ({', '.join(fk.columns)}) "
        f"REFERENCES {fk.referenced_table}({', '.join(fk.referenced_columns)})"
    )
    if fk.on_delete and fk.on_delete != "NO ACTION":
        sql += f" ON DELETE {fk.on_delete}"
    return sql


def render_index(table_name: str, index: IndexDef) -> str:
    unique = "UNIQUE " if index.is_unique else ""
    return f"CREATE {unique}INDEX {index.name} ON {table_name} ({', '.join(index.columns)})"


def synthesize_table(table: TableSchema, rules: DialectRules) -> SynthesizedDDL:
    return SynthesizedDDL(
        table=table.name,
        create_table_sql=render_create_table(table, rules),
        foreign_key_statements=[render_foreign_key(table.name, fk) for fk in table.foreign_keys],
        index_statements=[render_index(table.name, index) for index in table.indexes],
    )


def synthesize(snapshot: SchemaSnapshot) -> Dict[str, SynthesizedDDL]:
    """DDL for every table, keyed and ordered like the snapshot."""
    rules = rules_for(snapshot.dialect)
    return {
        name: synthesize_table(table, rules) for name, table in snapshot.tables.items()
    }


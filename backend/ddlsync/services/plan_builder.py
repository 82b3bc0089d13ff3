"""Orders synthesized DDL into a three-phase migration plan."""

from datetime import datetime
from typing import Dict, List, Optional

from ddlsync.models.plan import (MigrationPhase, MigrationPlan,
                                 MigrationStatement)
from ddlsync.models.schema import SchemaSnapshot, SynthesizedDDL


def build_plan(
    snapshot: SchemaSnapshot,
    ddl: Dict[str, SynthesizedDDL],
    generated_at: Optional[datetime] = None,
) -> MigrationPlan:
    """
    Every CREATE TABLE first, then every foreign key, then every index.

    Within each phase statements follow the snapshot's table order, grouped by
    owning table. Creating all tables before any foreign key means a key may
    reference a table that sorts after its own.
    """
    creates: List[MigrationStatement] = []
    foreign_keys: List[MigrationStatement] = []
    indexes: List[MigrationStatement] = []

    for name, table in snapshot.tables.items():
        table_ddl = ddl[name]
        creates.append(
            MigrationStatement(
                phase=MigrationPhase.CREATE_TABLE,
                table=name,
                object_name=name,
                sql=table_ddl.create_table_sql,
            )
        )
        for fk, sql in zip(table.foreign_keys, table_ddl.foreign_key_statements):
            foreign_keys.append(
                MigrationStatement(
                    phase=MigrationPhase.FOREIGN_KEY,
                    table=name,
                    object_name=fk.constraint_name,
                    sql=sql,
                )
            )
        for index, sql in zip(table.indexes, table_ddl.index_statements):
            indexes.append(
                MigrationStatement(
                    phase=MigrationPhase.INDEX,
                    table=name,
                    object_name=index.name,
                    sql=sql,
                )
            )

    return MigrationPlan(
        generated_at=generated_at or datetime.now().astimezone(),
        dialect=snapshot.dialect,
        table_count=len(snapshot.tables),
        statements=creates + foreign_keys + indexes,
    )


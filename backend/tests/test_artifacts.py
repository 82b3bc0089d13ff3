"""
Tests for the audit artifact and the emitted migration script
"""
import ast
import os
from datetime import datetime, timezone

import orjson
import pytest

from ddlsync.core.errors import SerializationError
from ddlsync.models.plan import MigrationPlan
from ddlsync.models.schema import (AnalysisSummary, ColumnDef, DataTypeKind,
                                   ForeignKeyDef, SchemaSnapshot, TableSchema)
from ddlsync.services.analysis_persister import (build_analysis_document,
                                                 persist_analysis)
from ddlsync.services.ddl_synthesizer import synthesize
from ddlsync.services.plan_builder import build_plan
from ddlsync.services.script_emitter import emit_script, render_script

CAPTURED_AT = datetime(2024, 3, 9, 8, 30, tzinfo=timezone.utc)


def _snapshot(with_tables=True):
    tables = {}
    if with_tables:
        column = ColumnDef(name="ID", data_type="NUMBER", kind=DataTypeKind.NUMERIC, ordinal_position=1)
        tables = {
            "HRMS_A": TableSchema(name="HRMS_A", columns=[column]),
            "HRMS_B": TableSchema(
                name="HRMS_B",
                columns=[column],
                foreign_keys=[
                    ForeignKeyDef(
                        constraint_name="HRMS_B_A_FK",
                        columns=["ID"],
                        referenced_table="HRMS_A",
                        referenced_columns=["ID"],
                    )
                ],
            ),
        }
    return SchemaSnapshot(dialect="oracle", table_prefix="HRMS_", captured_at=CAPTURED_AT, tables=tables)


def test_analysis_document_layout():
    snapshot = _snapshot()
    ddl = synthesize(snapshot)

    document = build_analysis_document(
        snapshot, ddl, AnalysisSummary.from_snapshot(snapshot), ["line"], timestamp=CAPTURED_AT
    )

    assert document["timestamp"] == "2024-03-09T08:30:00+00:00"
    assert list(document["create_statements"]) == ["HRMS_A", "HRMS_B"]
    # Only tables that have foreign keys are listed
    assert list(document["constraint_statements"]) == ["HRMS_B"]
    assert document["index_statements"] == {}
    assert document["summary"]["total_tables"] == 2
    assert document["summary"]["total_constraints"] == 1
    assert document["analysis_log"] == ["line"]


def test_persist_empty_snapshot(tmp_path):
    """No matching tables still gives a well-formed artifact"""
    snapshot = _snapshot(with_tables=False)
    path = tmp_path / "out" / "analysis.json"

    persist_analysis(snapshot, synthesize(snapshot), AnalysisSummary.from_snapshot(snapshot), path)

    document = orjson.loads(path.read_bytes())
    assert document["snapshot"]["tables"] == {}
    assert document["create_statements"] == {}
    assert document["summary"] == {
        "total_tables": 0,
        "total_columns": 0,
        "total_constraints": 0,
        "total_indexes": 0,
        "tables": [],
    }


def test_persist_failure_raises_serialization_error(tmp_path):
    snapshot = _snapshot(with_tables=False)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(SerializationError) as exc_info:
        persist_analysis(
            snapshot,
            synthesize(snapshot),
            AnalysisSummary.from_snapshot(snapshot),
            blocker / "analysis.json",
        )

    assert exc_info.value.details["path"].endswith("analysis.json")


def test_rendered_script_embeds_plan_as_data():
    snapshot = _snapshot()
    plan = build_plan(snapshot, synthesize(snapshot), generated_at=CAPTURED_AT)

    source = render_script(plan)
    module = ast.parse(source)

    assignment = next(
        node for node in module.body
        if isinstance(node, ast.Assign) and node.targets[0].id == "PLAN"
    )
    embedded = MigrationPlan.model_validate(ast.literal_eval(assignment.value))
    assert embedded == plan
    assert "Statements: 2 tables, 1 foreign keys, 0 indexes" in source
    assert "from ddlsync.main import run_embedded_plan" in source


def test_sql_with_quotes_survives_embedding():
    column = ColumnDef(
        name="STATUS",
        data_type="CHAR",
        kind=DataTypeKind.CHARACTER,
        ordinal_position=1,
        length=1,
        default_expression="'A'",
    )
    snapshot = SchemaSnapshot(
        dialect="oracle",
        table_prefix="HRMS_",
        captured_at=CAPTURED_AT,
        tables={"HRMS_Q": TableSchema(name="HRMS_Q", columns=[column])},
    )
    plan = build_plan(snapshot, synthesize(snapshot), generated_at=CAPTURED_AT)

    module = ast.parse(render_script(plan))
    assignment = next(node for node in module.body if isinstance(node, ast.Assign))

    data = ast.literal_eval(assignment.value)
    assert data["statements"][0]["sql"] == 'CREATE TABLE HRMS_Q (\n  STATUS CHAR(1) DEFAULT \'A\'\n)'


def test_emit_script_is_executable(tmp_path):
    snapshot = _snapshot(with_tables=False)
    plan = build_plan(snapshot, synthesize(snapshot), generated_at=CAPTURED_AT)
    path = tmp_path / "exact_migration.py"

    emit_script(plan, path)

    assert os.access(path, os.X_OK)
    assert path.read_text(encoding="utf-8").startswith("#!/usr/bin/env python3")

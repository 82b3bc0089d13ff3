"""
Tests for plan execution and already-exists tolerance
"""
import pytest

from conftest import FakeAdapter
from ddlsync.core.errors import UnknownStatementError
from ddlsync.models.plan import MigrationPhase, MigrationStatement
from ddlsync.services.migration_runner import run_plan

STATEMENTS = [
    MigrationStatement(
        phase=MigrationPhase.CREATE_TABLE,
        table="HRMS_A",
        object_name="HRMS_A",
        sql="CREATE TABLE HRMS_A (\n  ID NUMBER\n)",
    ),
    MigrationStatement(
        phase=MigrationPhase.CREATE_TABLE,
        table="HRMS_B",
        object_name="HRMS_B",
        sql="CREATE TABLE HRMS_B (\n  ID NUMBER,\n  A_ID NUMBER\n)",
    ),
    MigrationStatement(
        phase=MigrationPhase.FOREIGN_KEY,
        table="HRMS_B",
        object_name="HRMS_B_A_FK",
        sql="ALTER TABLE HRMS_B ADD CONSTRAINT HRMS_B_A_FK FOREIGN KEY (A_ID) REFERENCES HRMS_A(ID)",
    ),
    MigrationStatement(
        phase=MigrationPhase.INDEX,
        table="HRMS_B",
        object_name="HRMS_B_A_ID_IDX",
        sql="CREATE INDEX HRMS_B_A_ID_IDX ON HRMS_B (A_ID)",
    ),
]


@pytest.mark.asyncio
async def test_run_plan_applies_in_order():
    adapter = FakeAdapter()
    progress = []

    report = await run_plan(adapter, STATEMENTS, progress=progress.append)

    assert adapter.executed == [s.sql for s in STATEMENTS]
    assert report.applied == ["HRMS_A", "HRMS_B", "HRMS_B_A_FK", "HRMS_B_A_ID_IDX"]
    assert report.skipped == []
    assert progress == [
        "Creating tables with exact structure...",
        "Created table: HRMS_A",
        "Created table: HRMS_B",
        "Adding foreign key constraints...",
        "Added FK constraint: HRMS_B_A_FK",
        "Creating indexes...",
        "Created index: HRMS_B_A_ID_IDX",
    ]


@pytest.mark.asyncio
async def test_rerun_against_migrated_target_skips_everything():
    """Every statement hits the already-exists path on the second run"""
    adapter = FakeAdapter()
    await run_plan(adapter, STATEMENTS)

    report = await run_plan(adapter, STATEMENTS)

    assert report.applied == []
    assert len(report.skipped) == len(STATEMENTS)
    assert report.total == len(STATEMENTS)


@pytest.mark.asyncio
async def test_unknown_failure_stops_the_run():
    adapter = FakeAdapter(failing_sql="HRMS_B_A_FK")

    with pytest.raises(UnknownStatementError) as exc_info:
        await run_plan(adapter, STATEMENTS)

    assert "ORA-00904" in exc_info.value.engine_error
    assert exc_info.value.sql == STATEMENTS[2].sql
    # The index after the failed foreign key is never attempted
    assert adapter.executed == [STATEMENTS[0].sql, STATEMENTS[1].sql]


@pytest.mark.asyncio
async def test_empty_plan():
    report = await run_plan(FakeAdapter(), [])

    assert report.total == 0

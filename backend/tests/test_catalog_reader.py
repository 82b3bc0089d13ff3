"""
Tests for the catalog reader against the in-memory adapter
"""
import pytest

from conftest import FakeAdapter
from ddlsync.core.errors import CatalogReadError
from ddlsync.services.catalog_reader import CatalogReader, like_prefix_pattern


def test_like_prefix_pattern_escapes_wildcards():
    assert like_prefix_pattern("HRMS_") == "HRMS\\_%"
    assert like_prefix_pattern("A%B") == "A\\%B%"


@pytest.mark.asyncio
async def test_list_tables_sorted_and_prefix_filtered(hrms_catalog):
    hrms_catalog["tables"].append({"TABLE_NAME": "HRMSX_LEGACY"})
    adapter = FakeAdapter(hrms_catalog)

    tables = await CatalogReader(adapter).list_tables("HRMS_")

    assert tables == ["HRMS_DEPARTMENTS", "HRMS_EMPLOYEES"]
    assert adapter.queries[0] == ("tables", {"pattern": "HRMS\\_%"})


@pytest.mark.asyncio
async def test_describe_table_sorts_columns(fake_adapter):
    table = await CatalogReader(fake_adapter).describe_table("HRMS_DEPARTMENTS")

    assert [c.name for c in table.columns] == ["DEPT_ID", "DEPT_NAME"]
    assert table.primary_key.columns == ["DEPT_ID"]
    assert [u.constraint_name for u in table.uniques] == ["HRMS_DEPT_NAME_UK"]
    # Both system NOT NULL checks are covered by the column definitions
    assert table.checks == []


@pytest.mark.asyncio
async def test_read_snapshot(fake_adapter):
    progress = []
    reader = CatalogReader(fake_adapter, progress=progress.append)

    snapshot = await reader.read_snapshot("HRMS_")

    assert snapshot.dialect == "oracle"
    assert snapshot.table_prefix == "HRMS_"
    assert snapshot.table_names() == ["HRMS_DEPARTMENTS", "HRMS_EMPLOYEES"]
    employees = snapshot.tables["HRMS_EMPLOYEES"]
    assert employees.indexes[0].columns == ["DEPT_ID"]
    assert "Analyzing table: HRMS_EMPLOYEES" in progress
    assert "   Foreign Keys: 1 constraints" in progress


@pytest.mark.asyncio
async def test_index_columns_from_name(hrms_catalog):
    hrms_catalog["HRMS_EMPLOYEES"]["index_columns"] = [
        {"INDEX_NAME": "HRMS_EMPLOYEES_DEPT_ID_IDX", "COLUMN_NAME": "SOMETHING_ELSE", "COLUMN_POSITION": 1},
    ]
    reader = CatalogReader(FakeAdapter(hrms_catalog), index_column_source="name")

    table = await reader.describe_table("HRMS_EMPLOYEES")

    assert table.indexes[0].columns == ["DEPT_ID"]
    assert table.indexes[0].columns_source == "name"


@pytest.mark.asyncio
async def test_empty_schema():
    snapshot = await CatalogReader(FakeAdapter({"tables": []})).read_snapshot("HRMS_")

    assert snapshot.tables == {}


@pytest.mark.asyncio
async def test_failed_query_raises_catalog_read_error(hrms_catalog):
    adapter = FakeAdapter(hrms_catalog, failing_queries={"foreign_keys"})

    with pytest.raises(CatalogReadError) as exc_info:
        await CatalogReader(adapter).read_snapshot("HRMS_")

    assert exc_info.value.table == "HRMS_DEPARTMENTS"
    assert exc_info.value.details["query"] == "foreign_keys"
    assert "ORA-00942" in exc_info.value.message


@pytest.mark.asyncio
async def test_failed_table_list_has_no_table(hrms_catalog):
    adapter = FakeAdapter(hrms_catalog, failing_queries={"tables"})

    with pytest.raises(CatalogReadError) as exc_info:
        await CatalogReader(adapter).list_tables("HRMS_")

    assert exc_info.value.table is None


@pytest.mark.asyncio
async def test_malformed_rows_raise_catalog_read_error(hrms_catalog):
    hrms_catalog["HRMS_DEPARTMENTS"]["columns"][0]["COLUMN_ID"] = "not-a-number"

    with pytest.raises(CatalogReadError, match="Malformed 'columns' rows"):
        await CatalogReader(FakeAdapter(hrms_catalog)).describe_table("HRMS_DEPARTMENTS")

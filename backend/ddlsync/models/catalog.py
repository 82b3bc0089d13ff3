"""Typed records for raw catalog query rows.

Each catalog query has exactly one record type. Rows are decoded right after
the query returns, so nothing downstream depends on the driver's field-name
casing (python-oracledb returns ``COLUMN_NAME``, asyncpg ``column_name``).
"""
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, model_validator

R = TypeVar("R", bound="CatalogRow")


class CatalogRow(BaseModel):
    """Base record: field names are matched case-insensitively"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _lowercase_keys(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {str(key).lower(): value for key, value in data.items()}
        return data

    @classmethod
    def decode_all(cls: Type[R], rows: List[Mapping[str, Any]]) -> List[R]:
        return [cls.model_validate(row) for row in rows]


class TableRow(CatalogRow):
    table_name: str


class ColumnRow(CatalogRow):
    column_name: str
    data_type: str
    column_id: int
    data_length: Optional[int] = None
    data_precision: Optional[int] = None
    data_scale: Optional[int] = None
    char_length: Optional[int] = None
    nullable: Union[str, bool] = "Y"
    data_default: Optional[str] = None


class KeyColumnRow(CatalogRow):
    """Primary key and unique constraint columns"""
    constraint_name: str
    column_name: str
    position: Optional[int] = None


class ForeignKeyRow(CatalogRow):
    constraint_name: str
    column_name: str
    referenced_table: str
    referenced_column: str
    position: Optional[int] = None
    delete_rule: Optional[str] = None


class CheckRow(CatalogRow):
    constraint_name: str
    search_condition: Optional[str] = None


class IndexRow(CatalogRow):
    index_name: str
    uniqueness: Union[str, bool] = "NONUNIQUE"
    index_type: Optional[str] = None


class IndexColumnRow(CatalogRow):
    index_name: str
    column_name: str
    column_position: int


class TableCatalogRows(BaseModel):
    """All decoded rows describing one table, as handed to the builder"""
    table_name: str
    columns: List[ColumnRow] = []
    primary_key: List[KeyColumnRow] = []
    foreign_keys: List[ForeignKeyRow] = []
    uniques: List[KeyColumnRow] = []
    checks: List[CheckRow] = []
    indexes: List[IndexRow] = []
    index_columns: List[IndexColumnRow] = []

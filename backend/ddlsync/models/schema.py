"""Schema snapshot models"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class DataTypeKind(str, Enum):
    """Categorical column type, decides the size suffix in DDL"""
    CHARACTER = "character"
    NUMERIC = "numeric"
    DATETIME = "datetime"
    LARGE_OBJECT = "large_object"
    BINARY = "binary"
    OTHER = "other"


class ColumnDef(BaseModel):
    """One physical column"""
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    kind: DataTypeKind
    ordinal_position: int
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True
    default_expression: Optional[str] = None


class PrimaryKeyDef(BaseModel):
    """Primary key columns in key order"""
    model_config = ConfigDict(frozen=True)

    constraint_name: str
    columns: List[str]


class ForeignKeyDef(BaseModel):
    """Foreign key, emitted as a separate ALTER TABLE"""
    model_config = ConfigDict(frozen=True)

    constraint_name: str
    columns: List[str]
    referenced_table: str
    referenced_columns: List[str]
    on_delete: str = "NO ACTION"


class UniqueConstraintDef(BaseModel):
    """Named unique constraint"""
    model_config = ConfigDict(frozen=True)

    constraint_name: str
    columns: List[str]


class CheckConstraintDef(BaseModel):
    """Named check constraint; predicate is replayed verbatim"""
    model_config = ConfigDict(frozen=True)

    constraint_name: str
    predicate: str


class IndexDef(BaseModel):
    """Secondary index not backing a constraint"""
    model_config = ConfigDict(frozen=True)

    name: str
    is_unique: bool = False
    columns: List[str] = []
    columns_source: Literal["catalog", "name"] = "catalog"


class TableSchema(BaseModel):
    """Everything needed to rebuild one table"""
    model_config = ConfigDict(frozen=True)

    name: str
    columns: List[ColumnDef]
    primary_key: Optional[PrimaryKeyDef] = None
    foreign_keys: List[ForeignKeyDef] = []
    uniques: List[UniqueConstraintDef] = []
    checks: List[CheckConstraintDef] = []
    indexes: List[IndexDef] = []

    @property
    def constraint_count(self) -> int:
        pk = 1 if self.primary_key else 0
        return pk + len(self.foreign_keys) + len(self.uniques) + len(self.checks)


class SchemaSnapshot(BaseModel):
    """Complete catalog capture of one analysis run, keyed by table name"""
    model_config = ConfigDict(frozen=True)

    dialect: Literal["oracle", "postgres"]
    table_prefix: str
    captured_at: datetime
    tables: Dict[str, TableSchema] = {}

    def table_names(self) -> List[str]:
        return list(self.tables.keys())


class SynthesizedDDL(BaseModel):
    """DDL rendered for one table"""
    model_config = ConfigDict(frozen=True)

    table: str
    create_table_sql: str
    foreign_key_statements: List[str] = []
    index_statements: List[str] = []


class AnalysisSummary(BaseModel):
    """Counts printed at the end of an analysis run"""
    total_tables: int
    total_columns: int
    total_constraints: int
    total_indexes: int
    tables: List[str]

    @classmethod
    def from_snapshot(cls, snapshot: SchemaSnapshot) -> "AnalysisSummary":
        tables = list(snapshot.tables.values())
        return cls(
            total_tables=len(tables),
            total_columns=sum(len(t.columns) for t in tables),
            total_constraints=sum(t.constraint_count for t in tables),
            total_indexes=sum(len(t.indexes) for t in tables),
            tables=snapshot.table_names(),
        )

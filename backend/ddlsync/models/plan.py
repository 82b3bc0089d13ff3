"""Migration plan models"""
from datetime import datetime
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict


class MigrationPhase(str, Enum):
    """Execution phases, in the order they run"""
    CREATE_TABLE = "create_table"
    FOREIGN_KEY = "foreign_key"
    INDEX = "index"


class MigrationStatement(BaseModel):
    """One DDL statement with the metadata needed to report on it"""
    model_config = ConfigDict(frozen=True)

    phase: MigrationPhase
    table: str
    object_name: str
    sql: str


class MigrationPlan(BaseModel):
    """Ordered statements for an empty target database"""
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    dialect: Literal["oracle", "postgres"]
    table_count: int
    statements: List[MigrationStatement] = []

    def by_phase(self, phase: MigrationPhase) -> List[MigrationStatement]:
        return [s for s in self.statements if s.phase == phase]


class MigrationReport(BaseModel):
    """Outcome of a migration run"""
    applied: List[str] = []
    skipped: List[str] = []

    @property
    def total(self) -> int:
        return len(self.applied) + len(self.skipped)

"""
Models package initialization.
Exports the schema, catalog-row and plan models for easier access.
"""

from .catalog import (CatalogRow, CheckRow, ColumnRow, ForeignKeyRow,
                      IndexColumnRow, IndexRow, KeyColumnRow,
                      TableCatalogRows, TableRow)
from .plan import (MigrationPhase, MigrationPlan, MigrationReport,
                   MigrationStatement)
from .schema import (AnalysisSummary, CheckConstraintDef, ColumnDef,
                     DataTypeKind, ForeignKeyDef, IndexDef, PrimaryKeyDef,
                     SchemaSnapshot, SynthesizedDDL, TableSchema,
                     UniqueConstraintDef)

"""
Executes a migration plan against a target database.

Each statement runs on its own borrowed connection. A duplicate-object
signal from the engine means the object is already in place: it is logged
and skipped, so a second run over a migrated target succeeds. Any other
failure stops the run; statements after it are not attempted.
"""

import logging
from typing import Callable, Iterable, Optional

from ddlsync.adapters.base import CatalogAdapter
from ddlsync.core import metrics
from ddlsync.core.error_utils import truncate_error_message
from ddlsync.core.errors import AlreadyExistsError, UnknownStatementError
from ddlsync.models.plan import MigrationPhase, MigrationReport, MigrationStatement

logger = logging.getLogger(__name__)

PHASE_LABELS = {
    MigrationPhase.CREATE_TABLE: "Created table",
    MigrationPhase.FOREIGN_KEY: "Added FK constraint",
    MigrationPhase.INDEX: "Created index",
}

PHASE_BANNERS = {
    MigrationPhase.CREATE_TABLE: "Creating tables with exact structure...",
    MigrationPhase.FOREIGN_KEY: "Adding foreign key constraints...",
    MigrationPhase.INDEX: "Creating indexes...",
}


async def execute_statement(adapter: CatalogAdapter, statement: MigrationStatement) -> None:
    """
    Runs one statement, translating engine errors into the migration taxonomy.

    Raises:
        AlreadyExistsError: The engine reported a duplicate object.
        UnknownStatementError: Any other failure.
    """
    try:
        await adapter.execute_ddl(statement.sql)
    except Exception as e:
        engine_error = truncate_error_message(e, max_length=500)
        if adapter.is_already_exists(e):
            raise AlreadyExistsError(statement.sql, engine_error) from e
        raise UnknownStatementError(statement.sql, engine_error) from e


async def run_plan(
    adapter: CatalogAdapter,
    statements: Iterable[MigrationStatement],
    progress: Optional[Callable[[str], None]] = None,
) -> MigrationReport:
    """
    Executes ``statements`` in order.

    Returns:
        A report of applied and skipped objects.

    Raises:
        UnknownStatementError: On the first statement that fails for any
            reason other than the object already existing.
    """
    emit = progress or logger.info
    report = MigrationReport()
    current_phase = None

    for statement in statements:
        if statement.phase != current_phase:
            current_phase = statement.phase
            emit(PHASE_BANNERS[current_phase])

        label = f"{statement.phase.value} {statement.object_name}"
        try:
            await execute_statement(adapter, statement)
        except AlreadyExistsError as e:
            logger.info(f"[already_exists] Skipping {label}: {e.engine_error}")
            metrics.migration_statements_total.labels(
                phase=statement.phase.value, outcome="skipped"
            ).inc()
            report.skipped.append(statement.object_name)
            continue
        except UnknownStatementError as e:
            logger.error(f"[statement_failed] {label}: {e.engine_error}")
            metrics.migration_statements_total.labels(
                phase=statement.phase.value, outcome="failed"
            ).inc()
            raise

        metrics.migration_statements_total.labels(
            phase=statement.phase.value, outcome="applied"
        ).inc()
        report.applied.append(statement.object_name)
        emit(f"{PHASE_LABELS[statement.phase]}: {statement.object_name}")

    return report

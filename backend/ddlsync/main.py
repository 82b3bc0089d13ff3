"""Command-line entry points for schema analysis and migration runs.

``ddlsync-analyze`` reads the source catalog and writes the audit artifact and
the migration script. Generated migration scripts call `run_embedded_plan`.
Both exit with status 1 on a fatal error and 0 otherwise.
"""
import asyncio
import logging
import sys
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from ddlsync.adapters.factory import AdapterFactory
from ddlsync.core.config import Settings, get_settings
from ddlsync.core.error_utils import safe_log_error
from ddlsync.core.errors import DDLSyncError, UnknownStatementError
from ddlsync.models.plan import MigrationPlan, MigrationReport
from ddlsync.models.schema import AnalysisSummary
from ddlsync.services.analysis import AnalysisResult, SchemaAnalysis
from ddlsync.services.migration_runner import run_plan

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Progress goes to stdout, one timestamped line per event."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry error tracking if DSN is configured."""
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment="development" if settings.DEBUG else "production",
            integrations=[
                LoggingIntegration(
                    level=logging.INFO,  # Capture info and above as breadcrumbs
                    event_level=logging.ERROR  # Send errors and above as events
                ),
            ],
        )
        logger.info("Sentry error tracking initialized")
    else:
        logger.debug("Sentry DSN not configured - error tracking disabled")


async def analyze(settings: Settings, factory: Optional[AdapterFactory] = None) -> AnalysisResult:
    """Connects to the source database and runs one full analysis."""
    factory = factory or AdapterFactory()
    try:
        adapter = await factory.get_or_create(settings)
        analysis = SchemaAnalysis(
            adapter=adapter,
            table_prefix=settings.TABLE_PREFIX,
            analysis_path=settings.analysis_path,
            script_path=settings.migration_script_path,
            index_column_source=settings.INDEX_COLUMN_SOURCE,
        )
        return await analysis.run()
    finally:
        await factory.shutdown()


async def migrate(
    settings: Settings, plan: MigrationPlan, factory: Optional[AdapterFactory] = None
) -> MigrationReport:
    """Applies ``plan`` to the target database configured in ``settings``."""
    if not plan.statements:
        logger.info("Migration plan is empty; nothing to do")
        return MigrationReport()

    factory = factory or AdapterFactory()
    try:
        adapter = await factory.get_or_create(settings)
        return await run_plan(adapter, plan.statements)
    finally:
        await factory.shutdown()


def print_summary(summary: AnalysisSummary, script_name: str) -> None:
    print("\nExact Analysis Summary:")
    print(f"   Total Tables: {summary.total_tables}")
    print(f"   Total Columns: {summary.total_columns}")
    print(f"   Total Constraints: {summary.total_constraints}")
    print(f"   Total Indexes: {summary.total_indexes}")
    print("\nNext Steps:")
    print("1. Review the exact migration script")
    print("2. Update .env file to point to target database")
    print(f"3. Run: python {script_name}")


def analyze_main() -> int:
    """``ddlsync-analyze``: no arguments, configuration from the environment."""
    settings = get_settings()
    configure_logging(settings)
    init_sentry(settings)

    try:
        result = asyncio.run(analyze(settings))
    except DDLSyncError as e:
        safe_log_error(logger, f"[{e.code}] Exact analysis failed: {e.message}")
        return 1

    print_summary(result.summary, result.script_path.name)
    return 0


def run_embedded_plan(plan_data: Dict[str, Any], settings: Optional[Settings] = None) -> int:
    """
    Entry point of generated migration scripts.

    The plan's dialect overrides ``DB_DIALECT``; everything else (credentials,
    pool sizing) comes from the environment.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    init_sentry(settings)

    plan = MigrationPlan.model_validate(plan_data)
    if plan.dialect != settings.DB_DIALECT:
        settings = settings.model_copy(update={"DB_DIALECT": plan.dialect})

    logger.info(
        f"Starting exact database migration ({len(plan.statements)} statements, "
        f"{plan.table_count} tables)"
    )
    try:
        report = asyncio.run(migrate(settings, plan))
    except UnknownStatementError as e:
        safe_log_error(logger, f"Migration failed: {e.engine_error}")
        return 1
    except DDLSyncError as e:
        safe_log_error(logger, f"[{e.code}] Migration failed: {e.message}")
        return 1

    logger.info(
        f"Exact migration completed successfully! "
        f"({len(report.applied)} applied, {len(report.skipped)} already present)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(analyze_main())

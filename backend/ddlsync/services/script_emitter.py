"""
Generates the standalone migration script from a `MigrationPlan`.

The plan is serialized to plain data and embedded as a Python literal, so the
SQL text is never spliced into code by hand. The generated module needs only
an installed ``ddlsync`` and connection settings in its environment.
"""

import logging
import pprint
from pathlib import Path

from ddlsync.core.errors import SerializationError
from ddlsync.models.plan import MigrationPhase, MigrationPlan

logger = logging.getLogger(__name__)

SCRIPT_TEMPLATE = '''#!/usr/bin/env python3
"""
Exact Database Migration Script
Generated from source database analysis
Created: {created}
Dialect: {dialect}
Tables: {table_count}
Statements: {create_count} tables, {fk_count} foreign keys, {index_count} indexes

Run with no arguments. Connection settings are read from the environment
(a .env file is honoured). Objects that already exist are skipped; any other
failure stops the migration with a non-zero exit code.
"""
import sys

from ddlsync.main import run_embedded_plan

PLAN = {plan}


if __name__ == "__main__":
    sys.exit(run_embedded_plan(PLAN))
'''


def render_script(plan: MigrationPlan) -> str:
    data = plan.model_dump(mode="json")
    return SCRIPT_TEMPLATE.format(
        created=data["generated_at"],
        dialect=plan.dialect,
        table_count=plan.table_count,
        create_count=len(plan.by_phase(MigrationPhase.CREATE_TABLE)),
        fk_count=len(plan.by_phase(MigrationPhase.FOREIGN_KEY)),
        index_count=len(plan.by_phase(MigrationPhase.INDEX)),
        plan=pprint.pformat(data, indent=1, width=100, sort_dicts=False),
    )


def emit_script(plan: MigrationPlan, path: Path) -> Path:
    """
    Writes the migration script to ``path``.

    Raises:
        SerializationError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_script(plan), encoding="utf-8")
        path.chmod(0o755)
    except OSError as e:
        raise SerializationError(
            f"Could not write migration script: {e}", path=str(path)
        ) from e
    logger.info(f"Exact migration script generated: {path}")
    return path

"""
Schema analysis run: catalog read, DDL synthesis, audit artifact and
migration script.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from ddlsync.adapters.base import CatalogAdapter
from ddlsync.models.plan import MigrationPlan
from ddlsync.models.schema import AnalysisSummary, SchemaSnapshot, SynthesizedDDL
from ddlsync.services.analysis_persister import persist_analysis
from ddlsync.services.catalog_reader import CatalogReader
from ddlsync.services.ddl_synthesizer import synthesize
from ddlsync.services.plan_builder import build_plan
from ddlsync.services.schema_builder import IndexColumnSource
from ddlsync.services.script_emitter import emit_script

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    snapshot: SchemaSnapshot
    ddl: Dict[str, SynthesizedDDL]
    plan: MigrationPlan
    summary: AnalysisSummary
    analysis_path: Path
    script_path: Path


@dataclass
class SchemaAnalysis:
    """
    One analysis run against a connected adapter.

    The audit artifact is written before the migration script; if it cannot
    be written the run fails and no script is emitted.
    """

    adapter: CatalogAdapter
    table_prefix: str
    analysis_path: Path
    script_path: Path
    index_column_source: IndexColumnSource = "catalog"
    analysis_log: List[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        timestamp = datetime.now().astimezone().isoformat(timespec="seconds")
        self.analysis_log.append(f"[{timestamp}] {message}")
        logger.info(message)

    async def run(self) -> AnalysisResult:
        """
        Raises:
            CatalogReadError: A catalog query failed.
            SerializationError: An artifact could not be written.
        """
        self.log("Starting exact source database analysis...")
        reader = CatalogReader(
            self.adapter,
            index_column_source=self.index_column_source,
            progress=self.log,
        )
        snapshot = await reader.read_snapshot(self.table_prefix)

        self.log("Generating exact CREATE TABLE statements...")
        ddl = synthesize(snapshot)
        summary = AnalysisSummary.from_snapshot(snapshot)
        plan = build_plan(snapshot, ddl)

        self.log(f"Saving analysis to: {self.analysis_path}")
        persist_analysis(snapshot, ddl, summary, self.analysis_path, self.analysis_log)
        emit_script(plan, self.script_path)
        self.log("Exact source database analysis completed")

        return AnalysisResult(
            snapshot=snapshot,
            ddl=ddl,
            plan=plan,
            summary=summary,
            analysis_path=self.analysis_path,
            script_path=self.script_path,
        )

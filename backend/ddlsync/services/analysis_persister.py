"""Writes the audit artifact for an analysis run."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from ddlsync.core.errors import SerializationError
from ddlsync.models.schema import AnalysisSummary, SchemaSnapshot, SynthesizedDDL

logger = logging.getLogger(__name__)


def build_analysis_document(
    snapshot: SchemaSnapshot,
    ddl: Dict[str, SynthesizedDDL],
    summary: AnalysisSummary,
    analysis_log: Optional[List[str]] = None,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    The artifact keeps table order. Foreign key and index statements are
    listed only for tables that have some.
    """
    return {
        "timestamp": (timestamp or datetime.now().astimezone()).isoformat(),
        "dialect": snapshot.dialect,
        "table_prefix": snapshot.table_prefix,
        "snapshot": snapshot.model_dump(mode="json"),
        "create_statements": {name: item.create_table_sql for name, item in ddl.items()},
        "constraint_statements": {
            name: item.foreign_key_statements
            for name, item in ddl.items()
            if item.foreign_key_statements
        },
        "index_statements": {
            name: item.index_statements for name, item in ddl.items() if item.index_statements
        },
        "summary": summary.model_dump(mode="json"),
        "analysis_log": list(analysis_log or []),
    }


def persist_analysis(
    snapshot: SchemaSnapshot,
    ddl: Dict[str, SynthesizedDDL],
    summary: AnalysisSummary,
    path: Path,
    analysis_log: Optional[List[str]] = None,
) -> Path:
    """
    Serializes the analysis to indented JSON at ``path``.

    Raises:
        SerializationError: If encoding or writing fails.
    """
    document = build_analysis_document(snapshot, ddl, summary, analysis_log)
    try:
        payload = orjson.dumps(document, option=orjson.OPT_INDENT_2)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
    except (OSError, orjson.JSONEncodeError) as e:
        raise SerializationError(f"Could not write analysis artifact: {e}", path=str(path)) from e
    logger.info(f"Exact analysis saved to: {path}")
    return path

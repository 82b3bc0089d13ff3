"""Exception hierarchy for schema analysis and migration runs"""

from typing import Any, Dict, List, Optional


class DDLSyncError(Exception):
    """Base exception for ddlsync"""

    def __init__(self, message: str, code: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ConfigurationError(DDLSyncError):
    """Missing or empty connection settings"""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"missing": missing or []},
        )


class PoolInitializationError(DDLSyncError):
    """Connection pool could not be established after all retries"""

    def __init__(self, message: str, dialect: str, attempts: int):
        super().__init__(
            message=message,
            code="POOL_INIT_ERROR",
            details={"dialect": dialect, "attempts": attempts},
        )


class CatalogReadError(DDLSyncError):
    """A catalog query failed (permissions, connectivity, bad table name)"""

    def __init__(self, message: str, table: Optional[str] = None, query: Optional[str] = None):
        self.table = table
        super().__init__(
            message=message,
            code="CATALOG_READ_ERROR",
            details={"table": table, "query": query},
        )


class StatementError(DDLSyncError):
    """Base for failures while executing a migration statement"""

    def __init__(self, message: str, code: str, sql: str, engine_error: str):
        self.sql = sql
        self.engine_error = engine_error
        super().__init__(
            message=message,
            code=code,
            details={"sql": sql[:200], "engine_error": engine_error},
        )


class AlreadyExistsError(StatementError):
    """The target already holds the object a statement creates"""

    def __init__(self, sql: str, engine_error: str):
        super().__init__(
            message=f"Object already exists: {engine_error}",
            code="ALREADY_EXISTS",
            sql=sql,
            engine_error=engine_error,
        )


class UnknownStatementError(StatementError):
    """Any statement failure that is not an 'already exists' signal"""

    def __init__(self, sql: str, engine_error: str):
        super().__init__(
            message=f"Statement failed: {engine_error}",
            code="STATEMENT_FAILED",
            sql=sql,
            engine_error=engine_error,
        )


class SerializationError(DDLSyncError):
    """Writing an artifact (audit JSON, migration script) failed"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message=message, code="SERIALIZATION_ERROR", details={"path": path}
        )

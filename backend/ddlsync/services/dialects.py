"""Per-dialect type classification and identity-default detection."""

import re
from dataclasses import dataclass
from typing import FrozenSet, Pattern, Tuple

from ddlsync.models.schema import DataTypeKind


@dataclass(frozen=True)
class DialectRules:
    name: str
    character_types: FrozenSet[str]
    numeric_types: FrozenSet[str]
    datetime_prefixes: Tuple[str, ...]
    large_object_types: FrozenSet[str]
    binary_types: FrozenSet[str]
    identity_default: Pattern[str]
    # Oracle keeps a byte length next to the char length; fall back to it
    # when the char length is missing
    length_falls_back_to_bytes: bool

    def classify(self, data_type: str) -> DataTypeKind:
        normalized = data_type.strip().upper()
        if normalized in self.character_types:
            return DataTypeKind.CHARACTER
        if normalized in self.numeric_types:
            return DataTypeKind.NUMERIC
        if normalized.startswith(self.datetime_prefixes):
            return DataTypeKind.DATETIME
        if normalized in self.large_object_types:
            return DataTypeKind.LARGE_OBJECT
        if normalized in self.binary_types:
            return DataTypeKind.BINARY
        return DataTypeKind.OTHER

    def is_identity_default(self, expression: str) -> bool:
        return bool(self.identity_default.search(expression))


ORACLE = DialectRules(
    name="oracle",
    character_types=frozenset({"VARCHAR2", "NVARCHAR2", "VARCHAR", "CHAR", "NCHAR"}),
    numeric_types=frozenset({"NUMBER", "FLOAT", "DECIMAL"}),
    datetime_prefixes=("DATE", "TIMESTAMP", "INTERVAL"),
    large_object_types=frozenset({"CLOB", "NCLOB", "BLOB", "BFILE", "LONG", "LONG RAW", "XMLTYPE"}),
    binary_types=frozenset({"RAW"}),
    identity_default=re.compile(r"ISEQ\$\$", re.IGNORECASE),
    length_falls_back_to_bytes=True,
)

POSTGRES = DialectRules(
    name="postgres",
    character_types=frozenset({"CHARACTER VARYING", "VARCHAR", "CHARACTER", "CHAR", "BPCHAR"}),
    numeric_types=frozenset({"NUMERIC", "DECIMAL"}),
    datetime_prefixes=("DATE", "TIMESTAMP", "TIME", "INTERVAL"),
    large_object_types=frozenset({"TEXT", "BYTEA", "JSON", "JSONB", "XML"}),
    binary_types=frozenset(),
    identity_default=re.compile(r"^\s*nextval\(", re.IGNORECASE),
    length_falls_back_to_bytes=False,
)

_RULES = {"oracle": ORACLE, "postgres": POSTGRES}


def rules_for(dialect: str) -> DialectRules:
    try:
        return _RULES[dialect]
    except KeyError:
        raise ValueError(f"Unsupported database dialect: '{dialect}'") from None

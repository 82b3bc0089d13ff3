"""Schema analysis and DDL migration for prefix-scoped relational schemas."""

__version__ = "1.0.0"

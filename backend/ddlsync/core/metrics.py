"""Prometheus metrics for catalog reads and migration runs."""
from prometheus_client import Counter, Histogram

# Catalog Reader Metrics
catalog_queries_total = Counter(
    'ddlsync_catalog_queries_total',
    'Total number of catalog queries issued',
    ['dialect', 'query', 'status']
)

catalog_query_duration_seconds = Histogram(
    'ddlsync_catalog_query_duration_seconds',
    'Catalog query duration in seconds',
    ['dialect', 'query'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

tables_analyzed_total = Counter(
    'ddlsync_tables_analyzed_total',
    'Total number of tables described',
    ['dialect']
)

# Migration Runner Metrics
migration_statements_total = Counter(
    'ddlsync_migration_statements_total',
    'Migration statements by phase and outcome',
    ['phase', 'outcome']
)

# Pool Metrics
pool_connect_attempts_total = Counter(
    'ddlsync_pool_connect_attempts_total',
    'Connection pool creation attempts',
    ['dialect', 'status']
)

"""
Centralized constants for SchemaForge.

Eliminates magic numbers scattered across the codebase.
Import from here instead of hardcoding values.
"""

# ===========================================================================
# Timeouts (seconds)
# ===========================================================================
CONNECTION_TIMEOUT_S = 10       # Driver connect timeout
POOL_WAIT_TIMEOUT_S = 30        # Waiting for a connection from pool

# ===========================================================================
# Connection pool
# ===========================================================================
POOL_MAX_CONNECTIONS = 5

# ===========================================================================
# Query / Data limits
# ===========================================================================
QUERY_PREVIEW_LIMIT = 1000      # "SELECT * ... LIMIT 1000" default
SCRIPT_SELECT_LIMIT = 100       # Limit used by "Script as SELECT"

# ===========================================================================
# Metadata cache
# ===========================================================================
METADATA_CACHE_TTL_S = 60
METADATA_CACHE_MAXSIZE = 200

# ===========================================================================
# Schemas
# ===========================================================================
DEFAULT_SCHEMA = "public"
MSSQL_DEFAULT_SCHEMA = "dbo"

# Organizational folders under a schema node
HIERARCHY_FOLDERS = (
    ("tables", "Tables"),
    ("views", "Views"),
    ("functions", "Functions"),
)

# ===========================================================================
# Constraints
# ===========================================================================
FK_ACTIONS = ("NO ACTION", "CASCADE", "SET NULL", "RESTRICT")

# CREATE/DROP DATABASE names: alphanumerics, underscores and hyphens only
DATABASE_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"

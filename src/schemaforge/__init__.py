"""
SchemaForge - Dialect adapter and schema-mutation core for a multi-database explorer.

Resolves explorer node identifiers, generates dialect-correct SQL for
PostgreSQL, MySQL and SQL Server, translates schema operations into ALTER
statements and tracks row edits for an open table view.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("schemaforge")
except PackageNotFoundError:
    # Running from a source checkout
    __version__ = "0.3.0"

__all__ = ["__version__"]

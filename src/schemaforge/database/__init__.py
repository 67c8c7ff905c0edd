"""
Database layer - Identifier resolution, dialect SQL generation, schema
operations and per-dialect adapters.

Submodules are imported directly (schemaforge.database.identifiers,
schemaforge.database.dialects, schemaforge.database.adapters, ...).
"""

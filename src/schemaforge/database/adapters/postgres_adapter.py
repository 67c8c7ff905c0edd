"""
PostgreSQL Adapter - psycopg2 connections
"""

from ..models import Dialect
from .base import DatabaseAdapter


class PostgresAdapter(DatabaseAdapter):
    """
    PostgreSQL server connection.

    Each database is reached through its own connection (psycopg2 cannot
    switch databases), hence one pool per browsed database.
    """

    dialect = Dialect.POSTGRES

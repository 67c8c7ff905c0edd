"""
MySQL Adapter - pymysql connections
"""

from typing import Any, List

from ..models import Dialect, TreeNode
from .base import ROOT_ID, DatabaseAdapter


class MySQLAdapter(DatabaseAdapter):
    """
    MySQL/MariaDB server connection.

    Databases play the schema role: the tree root always lists them as
    ``schema:<db>`` nodes, whatever show_all_databases says.
    """

    dialect = Dialect.MYSQL

    def _set_autocommit(self, conn: Any, enabled: bool):
        """pymysql switches autocommit through a method call."""
        conn.autocommit(enabled)

    def _root_nodes(self) -> List[TreeNode]:
        return self._schema_nodes(None, ROOT_ID)

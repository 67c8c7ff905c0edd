"""
Row editing state for open table views
"""

from .row_edit_session import EditState, RowEditSession

__all__ = ["EditState", "RowEditSession"]

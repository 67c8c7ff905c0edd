r"""
Row Edit Session - Pending edits, selection and insert draft for one table view

States:

    VIEWING --enter_edit--> EDITING --save--> SAVING --> VIEWING   (all rows saved)
                               |                   \--> EDITING   (a row failed)
                               \--cancel_edit--> VIEWING

Insert mode is independent of the edit state. Every mutation needs the
table's single primary-key column; composite keys disable editing.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from ..database.errors import (
    BatchPartialFailure,
    ConfirmationRequiredError,
    EditSessionError,
    MissingPrimaryKeyError,
)
from ..database.identifiers import resolve_identifier
from ..database.literals import parse_row_key
from ..database.models import TableMetadata
from ..database.schema_operations import OperationLike

import logging
logger = logging.getLogger(__name__)


class EditState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class RowEditSession:
    """
    Edit state of one open table.

    The adapter is injected; ``refetch`` is called after every successful
    mutation so the caller can reload the grid.

    Usage:
        session = RowEditSession(adapter, "schema:public.table:users", refetch=reload)
        session.load_rows(result.rows)
        session.enter_edit()
        session.cell_change("42", "email", "a@b.c")
        session.save()
    """

    def __init__(self, adapter: Any, table_id: str,
                 metadata: Optional[TableMetadata] = None,
                 refetch: Optional[Callable[[], None]] = None):
        """
        Args:
            adapter: DatabaseAdapter of the connection
            table_id: Node identifier of the table
            metadata: Table metadata (fetched through the adapter if None)
            refetch: Callback to reload the grid after a mutation
        """
        parsed = resolve_identifier(table_id)
        self.adapter = adapter
        self.table_id = table_id
        self.database = parsed.database
        self.schema = adapter.target_schema(parsed)
        self.table = parsed.table
        self.metadata = adapter.get_metadata(table_id) if metadata is None else metadata
        self._refetch = refetch

        self.state = EditState.VIEWING
        self.pending_changes: Dict[str, Dict[str, Any]] = {}
        self.selected_rows: Set[str] = set()
        self.is_inserting = False
        self.insert_draft: Dict[str, str] = {}
        self._row_keys: Dict[str, Any] = {}

    # ==================== Keys ====================

    @property
    def pk_column(self) -> Optional[str]:
        return self.metadata.primary_key_column

    @property
    def can_edit(self) -> bool:
        return self.pk_column is not None

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.pending_changes)

    def _require_pk(self, action: str) -> str:
        if self.pk_column is None:
            raise MissingPrimaryKeyError(
                f"Cannot {action} {self.table}: table has no single-column primary key"
            )
        return self.pk_column

    def row_key(self, row: Mapping[str, Any]) -> str:
        """Key of a result row: its primary-key value as text."""
        return str(row[self._require_pk("edit")])

    def load_rows(self, rows: Iterable[Mapping[str, Any]]):
        """
        Remember the primary-key values of the displayed rows.

        Row keys are strings; the original values are kept so updates and
        deletes send the key with its real type. Selected rows that are no
        longer displayed are deselected.
        """
        if self.pk_column is None:
            self._row_keys = {}
            self.selected_rows.clear()
            return
        self._row_keys = {str(row[self.pk_column]): row[self.pk_column] for row in rows}
        self.selected_rows &= set(self._row_keys)

    def pk_value(self, row_key: str) -> Any:
        if row_key in self._row_keys:
            return self._row_keys[row_key]
        return parse_row_key(row_key)

    def _after_mutation(self):
        if self._refetch is not None:
            self._refetch()

    # ==================== Editing ====================

    def enter_edit(self):
        if self.state != EditState.VIEWING:
            raise EditSessionError(f"Cannot start editing while {self.state.value}")
        self._require_pk("edit")
        self.state = EditState.EDITING

    def cell_change(self, row_key: str, column: str, value: Any):
        """Record a new value for one cell of a row."""
        if self.state != EditState.EDITING:
            raise EditSessionError("Cell changes are only accepted in edit mode")
        if column not in self.metadata.column_names():
            raise EditSessionError(f"Unknown column: {column}")
        self.pending_changes.setdefault(row_key, {})[column] = value

    def cancel_edit(self):
        """Leave edit mode, discarding every pending change."""
        if self.state != EditState.EDITING:
            raise EditSessionError(f"Cannot cancel editing while {self.state.value}")
        self.pending_changes = {}
        self.state = EditState.VIEWING

    def toggle_edit(self):
        if self.state == EditState.EDITING:
            self.cancel_edit()
        else:
            self.enter_edit()

    def save(self) -> int:
        """
        Send one update per changed row, in the order rows were first edited.

        Returns:
            Number of rows saved

        Raises:
            BatchPartialFailure: a row failed. Earlier rows are saved and no
                longer pending; the failing row and later ones stay pending
                and the session stays in edit mode.
        """
        if self.state != EditState.EDITING:
            raise EditSessionError(f"Nothing to save while {self.state.value}")
        pk_column = self._require_pk("save")

        rows = list(self.pending_changes.items())
        self.state = EditState.SAVING
        for index, (row_key, updates) in enumerate(rows):
            try:
                self.adapter.update_row(
                    self.schema, self.table, pk_column, self.pk_value(row_key),
                    dict(updates), database=self.database,
                )
            except Exception as e:
                for saved_key, _ in rows[:index]:
                    self.pending_changes.pop(saved_key, None)
                self.state = EditState.EDITING
                logger.error(f"Save stopped at row {index + 1} of {len(rows)} ({row_key}): {e}")
                raise BatchPartialFailure(
                    index, len(rows),
                    applied=[key for key, _ in rows[:index]],
                    remaining=[key for key, _ in rows[index:]],
                    cause=e,
                ) from e

        self.pending_changes = {}
        self.state = EditState.VIEWING
        logger.info(f"Saved {len(rows)} row(s) in {self.table}")
        self._after_mutation()
        return len(rows)

    # ==================== Selection / delete ====================

    def toggle_row_selection(self, row_key: str):
        self.selected_rows ^= {row_key}

    def clear_selection(self):
        self.selected_rows.clear()

    def delete_selected(self, confirmed: bool = False) -> int:
        """
        Delete every selected row with one statement.

        Raises:
            EditSessionError: nothing selected, or a save is in progress
            MissingPrimaryKeyError: no single primary-key column
            ConfirmationRequiredError: confirmed is not True
        """
        if self.state == EditState.SAVING:
            raise EditSessionError("Cannot delete while saving")
        if not self.selected_rows:
            raise EditSessionError("No rows selected")
        pk_column = self._require_pk("delete rows from")
        if not confirmed:
            raise ConfirmationRequiredError(
                f"Deleting {len(self.selected_rows)} row(s) requires confirmation"
            )

        keys = sorted(self.selected_rows)
        sql = self.adapter.builder.generate_delete(
            self.table, self.schema, pk_column, [self.pk_value(k) for k in keys]
        )
        self.adapter.execute_query(sql, database=self.database)

        for key in keys:
            self.pending_changes.pop(key, None)
        self.selected_rows.clear()
        logger.info(f"Deleted {len(keys)} row(s) from {self.table}")
        self._after_mutation()
        return len(keys)

    # ==================== Insert ====================

    def begin_insert(self):
        self.is_inserting = True
        self.insert_draft = {}

    def cancel_insert(self):
        self.is_inserting = False
        self.insert_draft = {}

    def toggle_insert(self):
        if self.is_inserting:
            self.cancel_insert()
        else:
            self.begin_insert()

    def set_insert_field(self, column: str, text: str):
        if not self.is_inserting:
            raise EditSessionError("Not in insert mode")
        if column not in self.metadata.column_names():
            raise EditSessionError(f"Unknown column: {column}")
        self.insert_draft[column] = text

    def insert_row(self):
        """
        Insert the draft row. Blank fields are left to column defaults.

        Raises:
            EditSessionError: not inserting, or every field is blank
        """
        if not self.is_inserting:
            raise EditSessionError("Not in insert mode")
        self._require_pk("insert into")
        if not any(text.strip() for text in self.insert_draft.values()):
            raise EditSessionError("Enter at least one value")

        sql = self.adapter.builder.generate_insert_from_draft(
            self.table, self.schema, self.insert_draft
        )
        self.adapter.execute_query(sql, database=self.database)

        self.cancel_insert()
        logger.info(f"Inserted a row into {self.table}")
        self._after_mutation()

    # ==================== Schema ====================

    def apply_schema(self, operations: List[OperationLike], atomic: Optional[bool] = None) -> List[str]:
        """Apply a table-designer batch, then reload metadata."""
        if self.state == EditState.SAVING:
            raise EditSessionError("Cannot alter the table while saving")
        try:
            statements = self.adapter.update_schema(
                self.schema, self.table, operations, database=self.database, atomic=atomic
            )
        except Exception:
            # Earlier operations may have landed; the batch error still wins
            try:
                self.metadata = self.adapter.get_metadata(self.table_id)
            except Exception as reload_error:
                logger.error(f"Metadata reload for {self.table_id} failed: {reload_error}")
            raise
        self.metadata = self.adapter.get_metadata(self.table_id)
        self._after_mutation()
        return statements

    def reset(self):
        """Forget all state (the view switched to another table or reloaded)."""
        self.state = EditState.VIEWING
        self.pending_changes = {}
        self.selected_rows = set()
        self.cancel_insert()
        self._row_keys = {}

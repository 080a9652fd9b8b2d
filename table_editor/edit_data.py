"""
Add/update/delete workflow of the editable table.

The controller consumes the events emitted by the table's controls and
dialogs, one at a time, and replaces the context's dataset with the result
of each confirmed action.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import streamlit as st

from .action_buttons import confirmation_window
from .column_types import column_specs
from .config_loader import get_config_value
from .context import EditContext
from .events import Event
from .form_builder import open_edit_modal, select_editable
from .i18n import i18n
from .notifications import notification_failure, notification_success
from .row_mutator import (
    action_markers_match,
    add_row,
    delete_row,
    format_edit_data,
    get_row,
    position_lookup,
    prepare_edit_data,
    set_action_markers,
    update_row,
)
from .row_model import missing_mandatory
from .table_renderer import render_table, update_table

logger = logging.getLogger(__name__)

ADD_INPUT = "add"
UPDATE_INPUT = "update"
DELETE_INPUT = "delete"
ADD_VALIDATE = "add_row"
UPDATE_VALIDATE = "update_row"
CONFIRM_DELETE = "confirmation_delete_row"


def create_edit_context(data: pd.DataFrame, update: bool = True, delete: bool = True,
                        namespace: str = "", page_size: Optional[int] = None) -> EditContext:
    """Context holding the prepared copy of data and its display names."""
    if page_size is None:
        page_size = get_config_value('table', 'page_size', 10)
    return EditContext(
        data=prepare_edit_data(data, update=update, delete=delete),
        colnames=[str(c) for c in data.columns],
        page_size=page_size,
        namespace=namespace,
    )


class EditDataController:
    """Handles row action events for one EditContext."""

    def __init__(self, ctx: EditContext,
                 var_edit: Optional[Sequence[str]] = None,
                 var_mandatory: Optional[Sequence[str]] = None,
                 update: bool = True,
                 delete: bool = True,
                 use_notify: Optional[bool] = None,
                 modal_size: Optional[str] = None,
                 modal_easy_close: Optional[bool] = None,
                 internal_colnames: Optional[Sequence[str]] = None,
                 title_add: Optional[str] = None,
                 title_update: Optional[str] = None):
        self.ctx = ctx
        self.var_edit = list(var_edit or [])
        self.var_mandatory = list(var_mandatory or [])
        self.update = update
        self.delete = delete
        self.use_notify = (get_config_value('notifications', 'enabled', True)
                           if use_notify is None else use_notify)
        self.modal_size = modal_size or get_config_value('modal', 'size', 'm')
        self.modal_easy_close = (get_config_value('modal', 'easy_close', False)
                                 if modal_easy_close is None else modal_easy_close)
        self.internal_colnames = internal_colnames
        self.title_add = title_add or i18n("Add a row")
        self.title_update = title_update or i18n("Update a row")

        self._handlers = {
            ctx.ns(ADD_INPUT): self._on_add,
            ctx.ns(UPDATE_INPUT): self._on_update,
            ctx.ns(DELETE_INPUT): self._on_delete,
            ctx.ns(ADD_VALIDATE): self._on_add_validate,
            ctx.ns(UPDATE_VALIDATE): self._on_update_validate,
            ctx.ns(f"{CONFIRM_DELETE}_yes"): self._on_delete_yes,
            ctx.ns(f"{CONFIRM_DELETE}_no"): self._on_delete_no,
        }

    def process_events(self) -> List[Event]:
        """
        Handle every pending event in delivery order.

        Only one dialog can be open at a time, so when several events would
        open one, the last of them wins and the earlier ones are skipped.
        """
        events = self.ctx.events.drain()
        dialog_events = {self.ctx.ns(ADD_INPUT), self.ctx.ns(UPDATE_INPUT), self.ctx.ns(DELETE_INPUT)}
        last_dialog = max((i for i, e in enumerate(events) if e.name in dialog_events), default=None)

        for i, event in enumerate(events):
            if event.name in dialog_events and i != last_dialog:
                logger.debug(f"Skipping {event.name}={event.value!r}, replaced by a later request")
                continue
            self.handle(event)
        return events

    def render(self, key: str = "table", download: bool = True) -> pd.DataFrame:
        """
        Render the add button, handle pending events and paint the table.

        Returns:
            The edited data in the caller's schema
        """
        st.button(
            i18n("Add a row"),
            key=self.ctx.ns(f"{key}_add"),
            icon=":material/add:",
            on_click=self.ctx.emit,
            args=(self.ctx.ns(ADD_INPUT), True),
        )
        self.sync_action_markers()
        self.process_events()
        render_table(self.ctx, update_input=UPDATE_INPUT, delete_input=DELETE_INPUT, key=key)

        if download:
            st.download_button(
                i18n("Download CSV"),
                data=self.to_csv_bytes(),
                file_name="data.csv",
                mime="text/csv",
                key=self.ctx.ns(f"{key}_download"),
            )
        return self.result()

    def sync_action_markers(self) -> bool:
        """
        Re-mark every row when update/delete were switched on or off after
        the data was prepared.

        Returns:
            True if the markers were rewritten
        """
        if action_markers_match(self.ctx.data, self.update, self.delete):
            return False
        logger.info(f"Row actions changed (update={self.update}, delete={self.delete}), re-marking rows")
        self._replace_data(set_action_markers(self.ctx.data, update=self.update, delete=self.delete))
        return True

    def handle(self, event: Event) -> bool:
        """Handle one event; returns False for events this controller ignores."""
        handler = self._handlers.get(event.name)
        if handler is None:
            logger.debug(f"Ignoring event {event.name}")
            return False
        logger.info(f"Handling event {event.name}={event.value!r}")
        handler(event.value)
        return True

    # Dialogs

    def open_add(self, default: Optional[Dict[str, Any]] = None):
        return open_edit_modal(
            self.ctx,
            default=default or {},
            id_validate=ADD_VALIDATE,
            title=self.title_add,
            var_edit=self.var_edit,
            var_mandatory=self.var_mandatory,
            modal_size=self.modal_size,
            modal_easy_close=self.modal_easy_close,
        )

    def open_update(self, default: Dict[str, Any]):
        return open_edit_modal(
            self.ctx,
            default=default,
            id_validate=UPDATE_VALIDATE,
            title=self.title_update,
            var_edit=self.var_edit,
            var_mandatory=self.var_mandatory,
            modal_size=self.modal_size,
            modal_easy_close=self.modal_easy_close,
        )

    # Event handlers

    def _on_add(self, value: Any) -> None:
        self.ctx.pending_edit = None
        self.open_add()

    def _on_update(self, row_id: Any) -> None:
        default = get_row(self.ctx.data, row_id)
        if not default:
            logger.warning(f"Update requested for unknown row {row_id}")
            return
        self.ctx.pending_edit = {'row_id': row_id}
        self.open_update(default)

    def _on_delete(self, row_id: Any) -> None:
        self.ctx.pending_delete = row_id
        confirmation_window(
            self.ctx,
            CONFIRM_DELETE,
            title=i18n("Delete"),
            message=i18n("Do you want to delete the selected row ?"),
        )

    def _on_delete_yes(self, value: Any) -> None:
        row_id = self.ctx.pending_delete
        self.ctx.pending_delete = None
        if row_id is None:
            logger.warning("Delete confirmed without a pending row")
            return
        self._replace_data(delete_row(self.ctx.data, row_id))
        notification_success(i18n("Deleted successfully"), i18n("The row has been deleted"),
                             use_notify=self.use_notify)

    def _on_delete_no(self, value: Any) -> None:
        logger.debug(f"Delete of row {self.ctx.pending_delete} declined")
        self.ctx.pending_delete = None

    def _on_add_validate(self, values: Dict[str, Any]) -> None:
        values = dict(values or {})
        missing = self.missing_mandatory(values)
        if missing:
            self._notify_missing(missing)
            self.ctx.form_version += 1
            self.open_add(default=values)
            return
        self._replace_data(add_row(self.ctx.data, values, update=self.update, delete=self.delete))
        self.ctx.form_version += 1
        notification_success(i18n("Registered"), i18n("Row has been saved"),
                             use_notify=self.use_notify)

    def _on_update_validate(self, values: Dict[str, Any]) -> None:
        values = dict(values or {})
        pending = self.ctx.pending_edit or {}
        row_id = pending.get('row_id')
        if row_id is None:
            logger.warning("Update submitted without a pending row")
            return

        missing = self.missing_mandatory(values)
        if missing:
            self._notify_missing(missing)
            self.ctx.form_version += 1
            self.open_update(values)
            return

        self._replace_data(update_row(self.ctx.data, row_id, values))
        self.ctx.pending_edit = None
        self.ctx.form_version += 1
        notification_success(i18n("Registered"), i18n("Row has been saved"),
                             use_notify=self.use_notify)

    # Helpers

    def missing_mandatory(self, values: Dict[str, Any]) -> List[str]:
        """Display names of mandatory editable fields left empty."""
        if not self.var_mandatory:
            return []
        lookup = position_lookup(list(self.ctx.data.columns))
        subset, positions = select_editable(self.ctx.data, self.var_edit, lookup)
        labels = [self.ctx.colnames[p] if p < len(self.ctx.colnames) else key
                  for key, p in zip(subset.columns, positions)]
        specs = column_specs(subset, labels)
        return missing_mandatory(specs, self.var_mandatory, values)

    def _notify_missing(self, missing: List[str]) -> None:
        logger.info(f"Mandatory fields missing: {missing}")
        notification_failure(
            i18n("Required field"),
            f"{i18n('Please fill in the required fields')}: {', '.join(missing)}",
            use_notify=self.use_notify,
        )

    def _replace_data(self, data: pd.DataFrame) -> None:
        self.ctx.set_data(data)
        update_table(self.ctx, data, self.ctx.colnames)

    # Results

    def result(self) -> pd.DataFrame:
        """Edited data with the caller's column names and no bookkeeping columns."""
        return format_edit_data(self.ctx.data, self.ctx.colnames, self.internal_colnames)

    def to_csv_bytes(self) -> bytes:
        """Edited data as UTF-8 CSV, for a download button."""
        return self.result().to_csv(index=False).encode('utf-8')

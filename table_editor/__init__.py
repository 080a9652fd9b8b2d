"""
Inline-editable data table for Streamlit apps.
"""

from .column_types import ColumnSpec, ColumnType, WidgetKind, infer_column_type, resolve_widget_kind
from .context import EditContext, get_edit_context, reset_edit_context
from .edit_data import EditDataController, create_edit_context
from .events import Event, EventPriority, EventQueue
from .form_builder import FormField, build_form_fields, open_edit_modal
from .notifications import (
    notification_failure,
    notification_info,
    notification_success,
    notification_warning,
)
from .row_mutator import format_edit_data, prepare_edit_data
from .table_renderer import render_table, table_display, update_table

__version__ = "1.0.0"

__all__ = [
    "ColumnSpec",
    "ColumnType",
    "WidgetKind",
    "infer_column_type",
    "resolve_widget_kind",
    "EditContext",
    "get_edit_context",
    "reset_edit_context",
    "EditDataController",
    "create_edit_context",
    "Event",
    "EventPriority",
    "EventQueue",
    "FormField",
    "build_form_fields",
    "open_edit_modal",
    "notification_failure",
    "notification_info",
    "notification_success",
    "notification_warning",
    "format_edit_data",
    "prepare_edit_data",
    "render_table",
    "table_display",
    "update_table",
]

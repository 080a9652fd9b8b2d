"""
Add/edit form generation.

build_form_fields() decides which input each column gets, its label and
its pre-fill value without touching Streamlit; render_form_field() and
open_edit_modal() turn those fields into widgets inside a dialog.
"""

import streamlit as st
import pandas as pd
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from .column_types import (
    ColumnType,
    WidgetKind,
    categorical_choices,
    empty_default,
    infer_column_type,
    is_missing,
    label_suffix,
    parse_date_value,
    resolve_widget_kind,
)
from .context import EditContext
from .events import EventPriority
from .exceptions import InvalidModalSizeError
from .i18n import i18n
from .row_mutator import data_columns, position_lookup

logger = logging.getLogger(__name__)

MODAL_WIDTHS = {
    's': 'small',
    'm': 'medium',
    'l': 'large',
    'xl': 'large'
}

REQUIRED_MARKER = "*"


@dataclass(frozen=True)
class FormField:
    """One input of the add/edit form."""

    key: str
    label: str
    column_type: ColumnType
    widget_kind: WidgetKind
    value: Any
    required: bool = False
    choices: Tuple[str, ...] = ()

    @property
    def suffix(self) -> str:
        return label_suffix(self.column_type)

    @property
    def display_label(self) -> str:
        if self.required:
            return f"{self.label}{REQUIRED_MARKER}{self.suffix}"
        return f"{self.label}{self.suffix}"

    @property
    def markdown_label(self) -> str:
        """Label with the required marker rendered in red."""
        if self.required:
            return f"{self.label}:red[{REQUIRED_MARKER}]{self.suffix}"
        return f"{self.label}{self.suffix}"


def select_editable(data: pd.DataFrame, var_edit: Optional[Sequence[str]] = None,
                    lookup: Optional[Dict[str, int]] = None) -> Tuple[pd.DataFrame, List[int]]:
    """
    Restrict data to the editable columns.

    Returns:
        The column subset and, for each kept column, its position among the
        caller-visible columns (used to find its display name)
    """
    if lookup is None:
        lookup = position_lookup(list(data.columns))

    if not var_edit:
        keys = data_columns(data)
    else:
        keys = [key for key in var_edit if key in lookup and key in data.columns]
        unknown = [key for key in var_edit if key not in keys]
        if unknown:
            logger.warning(f"Ignoring unknown editable columns: {unknown}")

    return data[keys], [lookup[key] for key in keys]


def prefill_value(raw: Any, column_type: ColumnType) -> Any:
    """Value shown in the widget: the row's value or the type's empty default."""
    if is_missing(raw):
        return empty_default(column_type)

    if column_type is ColumnType.DATE:
        parsed = parse_date_value(raw, with_time=False)
        return parsed if parsed is not None else empty_default(column_type)
    if column_type is ColumnType.DATETIME:
        parsed = parse_date_value(raw, with_time=True)
        return parsed if parsed is not None else empty_default(column_type)
    if column_type is ColumnType.NUMERIC:
        return raw.item() if hasattr(raw, 'item') else raw
    if column_type is ColumnType.BOOLEAN:
        return bool(raw)
    if column_type in (ColumnType.TEXT, ColumnType.CATEGORICAL):
        return str(raw)
    return raw


def build_form_fields(default: Optional[Dict[str, Any]],
                      data: pd.DataFrame,
                      colnames: Sequence[str],
                      var_mandatory: Optional[Sequence[str]],
                      position_var_edit: Sequence[int]) -> List[FormField]:
    """
    Build the form fields for one row, in column order.

    Args:
        default: Values of the row being edited keyed by internal column,
            empty for an addition
        data: Editable columns of the dataset
        colnames: Display names of all caller-visible columns
        var_mandatory: Display names of required fields
        position_var_edit: Position in colnames of each column of data

    Returns:
        One field per column; columns of an unrecognized type are left out
    """
    default = default or {}
    mandatory = set(var_mandatory or [])
    fields: List[FormField] = []

    for i, key in enumerate(data.columns):
        series = data.iloc[:, i]
        column_type = infer_column_type(series)
        widget_kind = resolve_widget_kind(column_type)

        if widget_kind is WidgetKind.NONE:
            logger.debug(f"No input for column {key} of dtype {series.dtype}")
            continue

        position = position_var_edit[i] if i < len(position_var_edit) else i
        if position < len(colnames):
            label = str(colnames[position])
        else:
            logger.warning(f"No display name at position {position}, using {key}")
            label = str(key)

        fields.append(FormField(
            key=str(key),
            label=label,
            column_type=column_type,
            widget_kind=widget_kind,
            value=prefill_value(default.get(key), column_type),
            required=label in mandatory,
            choices=tuple(categorical_choices(series)) if widget_kind is WidgetKind.CATEGORICAL else (),
        ))

    return fields


def render_form_field(field: FormField, key: str) -> Any:
    """Render a single form field and return its current value."""
    label = field.markdown_label
    kind = field.widget_kind

    if kind is WidgetKind.NUMBER:
        value = None if is_missing(field.value) else field.value
        return st.number_input(label, value=value, key=key)

    if kind is WidgetKind.CATEGORICAL:
        options = list(field.choices)
        index = options.index(field.value) if field.value in options else None
        selected = st.selectbox(
            label,
            options,
            index=index,
            key=key,
            placeholder=i18n("Select"),
            accept_new_options=True,
        )
        return "" if selected is None else selected

    if kind is WidgetKind.TEXT:
        return st.text_input(label, value=field.value, key=key)

    if kind is WidgetKind.BOOLEAN:
        return st.checkbox(label, value=bool(field.value), key=key)

    if kind is WidgetKind.DATE:
        return st.date_input(label, value=field.value, key=key)

    if kind is WidgetKind.DATETIME:
        current = field.value if isinstance(field.value, datetime) else datetime.now()
        col1, col2 = st.columns(2)
        with col1:
            date_part = st.date_input(label, value=current.date(), key=f"{key}_date")
        with col2:
            time_part = st.time_input(i18n("Time"), value=current.time(), key=f"{key}_time")
        if not isinstance(date_part, date):
            return None
        return datetime.combine(date_part, time_part)

    return None


def check_modal_size(modal_size: str) -> str:
    """Dialog width for a modal size, raising on unknown sizes."""
    if modal_size not in MODAL_WIDTHS:
        logger.error(f"Invalid modal size: {modal_size!r}")
        raise InvalidModalSizeError(modal_size, list(MODAL_WIDTHS))
    return MODAL_WIDTHS[modal_size]


def open_edit_modal(ctx: EditContext,
                    default: Optional[Dict[str, Any]] = None,
                    id_validate: str = "add_row",
                    title: Optional[str] = None,
                    data: Optional[pd.DataFrame] = None,
                    colnames: Optional[Sequence[str]] = None,
                    var_edit: Optional[Sequence[str]] = None,
                    var_mandatory: Optional[Sequence[str]] = None,
                    modal_size: str = "m",
                    modal_easy_close: bool = False) -> List[FormField]:
    """
    Open the add/edit dialog.

    Clicking the validate button emits id_validate with the field values
    keyed by internal column name.

    Returns:
        The fields shown in the dialog
    """
    width = check_modal_size(modal_size)
    if data is None:
        data = ctx.data
    if colnames is None:
        colnames = ctx.colnames

    subset, position_var_edit = select_editable(data, var_edit)
    fields = build_form_fields(default, subset, colnames, var_mandatory, position_var_edit)
    version = ctx.form_version

    @st.dialog(title or i18n("Add a row"), width=width, dismissible=modal_easy_close)
    def edit_dialog():
        values: Dict[str, Any] = {}
        for field in fields:
            values[field.key] = render_form_field(field, key=ctx.ns(f"{id_validate}_{field.key}_v{version}"))

        col1, col2 = st.columns([1, 1])
        with col1:
            if st.button(i18n("Close"), key=ctx.ns(f"{id_validate}_close_v{version}")):
                st.rerun()
        with col2:
            if st.button(i18n("Validate the entry"), key=ctx.ns(f"{id_validate}_v{version}"), type="primary"):
                ctx.emit(ctx.ns(id_validate), values, EventPriority.EVENT)
                st.rerun()

    logger.debug(f"Opening edit modal {id_validate} with {len(fields)} fields")
    edit_dialog()
    return fields

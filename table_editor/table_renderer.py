"""
Table display for the editable dataset.

table_display() computes what is shown (display names, column
definitions, action column visibility) and render_table() paints it with
Streamlit, one page at a time, with update/delete controls per row.
"""

import streamlit as st
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from .action_buttons import btn_delete, btn_update
from .column_types import is_missing
from .config_loader import get_config_value
from .context import EditContext
from .exceptions import ColumnMappingError
from .i18n import i18n
from .row_mutator import DELETE_COLUMN, ID_COLUMN, UPDATE_COLUMN, BOOKKEEPING_COLUMNS

logger = logging.getLogger(__name__)

UPDATE_WIDTH = 82
DELETE_WIDTH = 96


@dataclass(frozen=True)
class ColumnDefinition:
    """Display options of one table column."""

    name: Optional[str] = None
    width: Optional[int] = None
    sortable: bool = True
    html: bool = False
    filterable: bool = True
    show: bool = True


@dataclass
class TableView:
    """Everything needed to paint the table."""

    data: pd.DataFrame
    columns: Dict[str, ColumnDefinition]
    options: Dict[str, Any] = field(default_factory=dict)
    caller_columns: Dict[str, Any] = field(default_factory=dict)

    def is_shown(self, column: str) -> bool:
        definition = self.columns.get(column)
        return not isinstance(definition, ColumnDefinition) or definition.show

    def visible_data_columns(self) -> List[str]:
        return [c for c in self.data.columns if c not in BOOKKEEPING_COLUMNS and self.is_shown(c)]


def col_def_update(width: int = UPDATE_WIDTH) -> ColumnDefinition:
    return ColumnDefinition(
        name=i18n("Update"),
        width=width,
        sortable=False,
        html=True,
        filterable=False
    )


def col_def_delete(width: int = DELETE_WIDTH) -> ColumnDefinition:
    return ColumnDefinition(
        name=i18n("Delete"),
        width=width,
        sortable=False,
        html=True,
        filterable=False
    )


def all_missing(data: pd.DataFrame, column: str) -> bool:
    """True when column is absent or every value in it is NA."""
    if column not in data.columns:
        return True
    return bool(data[column].isna().all())


def rename_display(data: pd.DataFrame, colnames: Optional[Sequence[str]]) -> pd.DataFrame:
    """Copy of data with its first len(colnames) columns renamed positionally."""
    display = data.copy()
    if colnames is None:
        return display

    if len(colnames) > display.shape[1]:
        logger.error(f"Cannot map {len(colnames)} display names onto {display.shape[1]} columns")
        raise ColumnMappingError(len(colnames), display.shape[1])

    display.columns = list(colnames) + list(display.columns[len(colnames):])
    return display


def build_column_definitions(data: pd.DataFrame,
                             table_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge the caller's column definitions with the bookkeeping ones.

    The three bookkeeping columns always get this module's definitions; an
    action column is hidden when no row enables that action. Action column
    widths come from table_options, then from the table section of the
    configuration.
    """
    table_options = table_options or {}
    columns = dict(table_options.get('columns') or {})

    if all_missing(data, UPDATE_COLUMN):
        columns[UPDATE_COLUMN] = ColumnDefinition(show=False)
    else:
        columns[UPDATE_COLUMN] = col_def_update(
            table_options.get('update_width', get_config_value('table', 'update_width', UPDATE_WIDTH))
        )

    if all_missing(data, DELETE_COLUMN):
        columns[DELETE_COLUMN] = ColumnDefinition(show=False)
    else:
        columns[DELETE_COLUMN] = col_def_delete(
            table_options.get('delete_width', get_config_value('table', 'delete_width', DELETE_WIDTH))
        )

    columns[ID_COLUMN] = ColumnDefinition(show=False)
    return columns


def table_display(data: pd.DataFrame, colnames: Optional[Sequence[str]] = None,
                  table_options: Optional[Dict[str, Any]] = None) -> TableView:
    """
    Build the table view of data.

    Caller options are kept as they are, except data and columns which are
    always set here.
    """
    display = rename_display(data, colnames)
    table_options = dict(table_options or {})
    caller_columns = dict(table_options.get('columns') or {})

    options = {k: v for k, v in table_options.items() if k not in ('data', 'columns')}
    return TableView(
        data=display,
        columns=build_column_definitions(display, table_options),
        options=options,
        caller_columns=caller_columns,
    )


def page_count(n_rows: int, page_size: int) -> int:
    """Number of pages needed for n_rows, never less than one."""
    if page_size <= 0:
        return 1
    return max(1, -(-n_rows // page_size))


def clamp_page(page: int, n_pages: int) -> int:
    return min(max(int(page or 0), 0), n_pages - 1)


def update_table(ctx: EditContext, data: pd.DataFrame, colnames: Sequence[str]) -> pd.DataFrame:
    """
    Push updated data into the table shown by ctx, keeping its current page.

    Returns:
        The data with display column names
    """
    page = ctx.page
    if ctx.view is None:
        ctx.view = table_display(data, colnames)
    else:
        options = dict(ctx.view.options)
        options['columns'] = ctx.view.caller_columns
        ctx.view = table_display(data, colnames, options)

    page_size = ctx.view.options.get('page_size', ctx.page_size)
    ctx.page = clamp_page(page, page_count(len(ctx.view.data), page_size))
    if ctx.page != page:
        logger.debug(f"Page {page} no longer exists, showing page {ctx.page}")
    return ctx.view.data


def _set_page(ctx: EditContext, page: int) -> None:
    ctx.page = page


def _format_cell(value: Any) -> str:
    if is_missing(value):
        return ""
    return str(value)


def render_table(ctx: EditContext, view: Optional[TableView] = None,
                 update_input: str = "update", delete_input: str = "delete",
                 key: str = "table") -> TableView:
    """Paint the current page of the table with per-row action controls."""
    if view is None:
        view = ctx.view
    if view is None:
        view = table_display(ctx.data, ctx.colnames)
    ctx.view = view

    data = view.data
    page_size = view.options.get('page_size', ctx.page_size)
    n_pages = page_count(len(data), page_size)
    ctx.page = clamp_page(ctx.page, n_pages)

    show_update = view.is_shown(UPDATE_COLUMN)
    show_delete = view.is_shown(DELETE_COLUMN)
    columns = view.visible_data_columns()

    if view.options.get('caption'):
        st.caption(view.options['caption'])

    if data.empty:
        st.info(i18n("No data to display"))
        return view

    widths = [3] * len(columns) + [1] * (int(show_update) + int(show_delete))
    if not widths:
        return view

    header = st.columns(widths)
    for cell, column in zip(header, columns):
        definition = view.columns.get(column)
        name = definition.name if isinstance(definition, ColumnDefinition) and definition.name else column
        cell.markdown(f"**{name}**")
    action_headers = []
    if show_update:
        action_headers.append(view.columns[UPDATE_COLUMN].name)
    if show_delete:
        action_headers.append(view.columns[DELETE_COLUMN].name)
    for cell, name in zip(header[len(columns):], action_headers):
        cell.markdown(f"**{name}**")

    start = ctx.page * page_size
    page_rows = data.iloc[start:start + page_size]
    make_update = btn_update(update_input)
    make_delete = btn_delete(delete_input)

    for _, row in page_rows.iterrows():
        cells = st.columns(widths)
        for cell, column in zip(cells, columns):
            cell.write(_format_cell(row[column]))

        position = len(columns)
        if show_update:
            with cells[position]:
                if not is_missing(row.get(UPDATE_COLUMN)):
                    make_update(int(row[UPDATE_COLUMN])).render(ctx, key_prefix=f"{key}_")
            position += 1
        if show_delete:
            with cells[position]:
                if not is_missing(row.get(DELETE_COLUMN)):
                    make_delete(int(row[DELETE_COLUMN])).render(ctx, key_prefix=f"{key}_")

    if n_pages > 1:
        prev_col, info_col, next_col = st.columns([1, 3, 1])
        with prev_col:
            st.button(
                i18n("Previous"),
                key=ctx.ns(f"{key}_prev"),
                disabled=ctx.page == 0,
                on_click=_set_page,
                args=(ctx, ctx.page - 1),
            )
        with info_col:
            st.caption(f"{i18n('Page')} {ctx.page + 1} / {n_pages}")
        with next_col:
            st.button(
                i18n("Next"),
                key=ctx.ns(f"{key}_next"),
                disabled=ctx.page >= n_pages - 1,
                on_click=_set_page,
                args=(ctx, ctx.page + 1),
            )

    return view

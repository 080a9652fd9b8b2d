"""
Row level mutations of the edited dataset.

Every mutation returns a new DataFrame; the frame passed in is never
modified. format_edit_data() is the single exit point through which data is
handed back to callers, it removes the bookkeeping columns and restores the
caller's column names.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from pandas.api import types as ptypes

from .column_types import ColumnType, coerce_value, infer_column_type, is_missing

logger = logging.getLogger(__name__)

ID_COLUMN = ".datamods_id"
UPDATE_COLUMN = ".datamods_edit_update"
DELETE_COLUMN = ".datamods_edit_delete"
BOOKKEEPING_COLUMNS = (ID_COLUMN, UPDATE_COLUMN, DELETE_COLUMN)

INTERNAL_PREFIX = "col_"


def internal_column_names(n: int) -> List[str]:
    return [f"{INTERNAL_PREFIX}{i}" for i in range(1, n + 1)]


def data_columns(data: pd.DataFrame) -> List[str]:
    """Columns of data that are not bookkeeping columns, in order."""
    return [c for c in data.columns if c not in BOOKKEEPING_COLUMNS]


def position_lookup(columns: Sequence[str]) -> Dict[str, int]:
    """Map each internal key to its position among the caller-visible columns."""
    keys = [c for c in columns if c not in BOOKKEEPING_COLUMNS]
    return {key: i for i, key in enumerate(keys)}


def _action_marker(ids: pd.Series, enabled: bool) -> pd.Series:
    if enabled:
        return ids.astype("Int64")
    return pd.Series(pd.NA, index=ids.index, dtype="Int64")


def prepare_edit_data(data: pd.DataFrame, update: bool = True, delete: bool = True) -> pd.DataFrame:
    """
    Convert caller data into the internal representation used while editing.

    Columns are renamed col_1..col_N and the three bookkeeping columns are
    appended. The action markers hold the row id when the action is enabled
    and NA otherwise.
    """
    prepared = data.drop(columns=[c for c in BOOKKEEPING_COLUMNS if c in data.columns])
    prepared = prepared.reset_index(drop=True)
    prepared.columns = internal_column_names(prepared.shape[1])

    ids = pd.Series(np.arange(1, len(prepared) + 1), index=prepared.index, dtype="Int64")
    prepared[ID_COLUMN] = ids
    prepared[UPDATE_COLUMN] = _action_marker(ids, update)
    prepared[DELETE_COLUMN] = _action_marker(ids, delete)

    logger.debug(f"Prepared {len(prepared)} rows for editing (update={update}, delete={delete})")
    return prepared


def set_action_markers(data: pd.DataFrame, update: bool = True, delete: bool = True) -> pd.DataFrame:
    """Copy of data with the update/delete markers of every row reset."""
    result = data.copy()
    if ID_COLUMN not in result.columns:
        return result
    result[UPDATE_COLUMN] = _action_marker(result[ID_COLUMN], update)
    result[DELETE_COLUMN] = _action_marker(result[ID_COLUMN], delete)
    return result


def action_markers_match(data: pd.DataFrame, update: bool, delete: bool) -> bool:
    """True when every row's markers agree with the enabled actions."""
    for column, enabled in ((UPDATE_COLUMN, update), (DELETE_COLUMN, delete)):
        if column not in data.columns:
            continue
        markers = data[column]
        if enabled and not markers.notna().all():
            return False
        if not enabled and not markers.isna().all():
            return False
    return True


def format_edit_data(data: pd.DataFrame, colnames: Sequence[str],
                     internal_colnames: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Strip bookkeeping columns and rename internal columns to display names.

    Args:
        data: Dataset in internal representation
        colnames: Display names, in order
        internal_colnames: Source names to rename; defaults to the first
            len(colnames) columns by position. Names that are not present
            are skipped.

    Returns:
        A new DataFrame without bookkeeping columns
    """
    formatted = data.drop(columns=[c for c in BOOKKEEPING_COLUMNS if c in data.columns])

    if internal_colnames is None:
        internal_colnames = list(formatted.columns[:len(colnames)])

    mapping = {
        old: new for old, new in zip(internal_colnames, colnames)
        if old in formatted.columns
    }
    skipped = [old for old in internal_colnames if old not in formatted.columns]
    if skipped:
        logger.debug(f"Skipped absent columns while renaming: {skipped}")

    return formatted.rename(columns=mapping).reset_index(drop=True)


def get_row(data: pd.DataFrame, row_id: Any) -> Dict[str, Any]:
    """Values of one row keyed by internal column, empty if the id is unknown."""
    if ID_COLUMN not in data.columns:
        return {}
    matches = data.loc[_row_mask(data, row_id), data_columns(data)]
    if matches.empty:
        return {}
    return matches.iloc[0].to_dict()


def _row_mask(data: pd.DataFrame, row_id: Any) -> np.ndarray:
    return (data[ID_COLUMN] == row_id).fillna(False).to_numpy(dtype=bool)


def _prepare_column_for(frame: pd.DataFrame, key: str, value: Any) -> Any:
    """Widen a column's dtype so that value can be stored without loss."""
    series = frame[key]

    if ptypes.is_bool_dtype(series.dtype) and not ptypes.is_extension_array_dtype(series.dtype):
        return False if is_missing(value) else bool(value)

    if isinstance(series.dtype, pd.CategoricalDtype):
        if is_missing(value) or value == "":
            return None
        if value not in series.cat.categories:
            frame[key] = series.cat.add_categories([value])
        return value

    if ptypes.is_integer_dtype(series.dtype):
        nullable = ptypes.is_extension_array_dtype(series.dtype)
        if isinstance(value, float) and not np.isnan(value) and value.is_integer():
            return int(value)
        if isinstance(value, (int, np.integer)):
            return value
        if nullable and is_missing(value):
            return pd.NA
        frame[key] = series.astype("Float64" if nullable else "float64")

    return value


def _column_types(data: pd.DataFrame) -> Dict[str, ColumnType]:
    return {key: infer_column_type(data[key]) for key in data_columns(data)}


def next_row_id(data: pd.DataFrame) -> int:
    if ID_COLUMN not in data.columns or data[ID_COLUMN].dropna().empty:
        return 1
    return int(data[ID_COLUMN].max()) + 1


def add_row(data: pd.DataFrame, values: Dict[str, Any],
            update: bool = True, delete: bool = True) -> pd.DataFrame:
    """
    Append a row built from form values.

    Keys that are not columns of data are ignored; columns absent from
    values are left missing.
    """
    result = data.copy()
    types = _column_types(result)
    row_id = next_row_id(result)
    new_index = int(result.index.max()) + 1 if len(result) else 0

    row: Dict[str, Any] = {}
    for key, column_type in types.items():
        value = coerce_value(values[key], column_type) if key in values else None
        row[key] = _prepare_column_for(result, key, value)

    if ID_COLUMN in result.columns:
        row[ID_COLUMN] = row_id
    if UPDATE_COLUMN in result.columns:
        row[UPDATE_COLUMN] = row_id if update else pd.NA
    if DELETE_COLUMN in result.columns:
        row[DELETE_COLUMN] = row_id if delete else pd.NA

    new_row = pd.DataFrame(
        {key: pd.Series([row.get(key)], index=[new_index], dtype=result[key].dtype)
         for key in result.columns},
        index=[new_index]
    )
    result = pd.concat([result, new_row]) if len(result) else new_row

    logger.info(f"Added row {row_id}")
    return result


def update_row(data: pd.DataFrame, row_id: Any, values: Dict[str, Any]) -> pd.DataFrame:
    """Replace the values of the row identified by row_id; unknown ids are a no-op."""
    result = data.copy()

    if ID_COLUMN not in result.columns:
        logger.warning(f"Cannot update row {row_id}: no {ID_COLUMN} column")
        return result

    mask = _row_mask(result, row_id)
    if not mask.any():
        logger.warning(f"Cannot update row {row_id}: unknown id")
        return result

    types = _column_types(result)
    for key, raw in values.items():
        if key not in types:
            continue
        value = _prepare_column_for(result, key, coerce_value(raw, types[key]))
        result.loc[mask, key] = value

    logger.info(f"Updated row {row_id}")
    return result


def delete_row(data: pd.DataFrame, row_id: Any) -> pd.DataFrame:
    """Remove the row identified by row_id; unknown ids are a no-op."""
    if ID_COLUMN not in data.columns:
        logger.warning(f"Cannot delete row {row_id}: no {ID_COLUMN} column")
        return data.copy()

    mask = _row_mask(data, row_id)
    if not mask.any():
        logger.warning(f"Cannot delete row {row_id}: unknown id")
        return data.copy()

    logger.info(f"Deleted row {row_id}")
    return data.loc[~mask].reset_index(drop=True)

"""
Column type resolution for the edit form.

Maps a dataset column to a declared ColumnType and each ColumnType to the
kind of input widget used to edit it. The mapping is a closed table; columns
whose type cannot be resolved get no widget at all.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

import numpy as np
import pandas as pd
from pandas.api import types as ptypes
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    UNKNOWN = "unknown"


class WidgetKind(str, Enum):
    NUMBER = "number"
    CATEGORICAL = "categorical"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    NONE = "none"


WIDGET_KINDS: Dict[ColumnType, WidgetKind] = {
    ColumnType.NUMERIC: WidgetKind.NUMBER,
    ColumnType.CATEGORICAL: WidgetKind.CATEGORICAL,
    ColumnType.TEXT: WidgetKind.TEXT,
    ColumnType.BOOLEAN: WidgetKind.BOOLEAN,
    ColumnType.DATE: WidgetKind.DATE,
    ColumnType.DATETIME: WidgetKind.DATETIME,
    ColumnType.UNKNOWN: WidgetKind.NONE,
}

# Result of pandas.api.types.infer_dtype for object columns
_INFERRED_TYPES: Dict[str, ColumnType] = {
    "boolean": ColumnType.BOOLEAN,
    "integer": ColumnType.NUMERIC,
    "floating": ColumnType.NUMERIC,
    "mixed-integer-float": ColumnType.NUMERIC,
    "decimal": ColumnType.NUMERIC,
    "date": ColumnType.DATE,
    "datetime": ColumnType.DATETIME,
    "datetime64": ColumnType.DATETIME,
    "string": ColumnType.TEXT,
    "empty": ColumnType.TEXT,
}


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    label: str
    column_type: ColumnType

    @property
    def widget_kind(self) -> WidgetKind:
        return resolve_widget_kind(self.column_type)


def infer_column_type(series: pd.Series) -> ColumnType:
    """
    Determine the declared type of a column from its dtype.

    Boolean is checked before numeric since pandas counts bool as numeric.
    """
    dtype = series.dtype

    if ptypes.is_bool_dtype(dtype):
        return ColumnType.BOOLEAN
    if isinstance(dtype, pd.CategoricalDtype):
        return ColumnType.CATEGORICAL
    if ptypes.is_numeric_dtype(dtype):
        return ColumnType.NUMERIC
    if ptypes.is_datetime64_any_dtype(dtype):
        return ColumnType.DATETIME
    if ptypes.is_string_dtype(dtype) and not ptypes.is_object_dtype(dtype):
        return ColumnType.TEXT
    if ptypes.is_object_dtype(dtype):
        inferred = ptypes.infer_dtype(series, skipna=True)
        return _INFERRED_TYPES.get(inferred, ColumnType.UNKNOWN)

    return ColumnType.UNKNOWN


def resolve_widget_kind(column_type: ColumnType) -> WidgetKind:
    """Widget kind used to edit a column of the given type."""
    return WIDGET_KINDS.get(ColumnType(column_type), WidgetKind.NONE)


def column_specs(data: pd.DataFrame, colnames: Optional[List[str]] = None) -> List[ColumnSpec]:
    """Build one ColumnSpec per column, labelled positionally by colnames."""
    specs = []
    for i, key in enumerate(data.columns):
        label = colnames[i] if colnames is not None and i < len(colnames) else str(key)
        specs.append(ColumnSpec(str(key), label, infer_column_type(data[key])))
    return specs


def categorical_choices(series: pd.Series) -> List[str]:
    """Sorted union of the column's distinct values and its declared categories."""
    values = {str(v) for v in series.dropna().unique()}
    if isinstance(series.dtype, pd.CategoricalDtype):
        values.update(str(c) for c in series.cat.categories)
    return sorted(values)


def empty_default(column_type: ColumnType) -> Any:
    """Pre-fill value used when the row being edited has none."""
    column_type = ColumnType(column_type)
    if column_type is ColumnType.NUMERIC:
        return np.nan
    if column_type in (ColumnType.TEXT, ColumnType.CATEGORICAL):
        return ""
    if column_type is ColumnType.BOOLEAN:
        return False
    if column_type is ColumnType.DATE:
        return date.today()
    if column_type is ColumnType.DATETIME:
        return datetime.now().replace(microsecond=0)
    return None


def label_suffix(column_type: ColumnType) -> str:
    """Checkbox labels sit beside the box and take no separator."""
    return "" if ColumnType(column_type) is ColumnType.BOOLEAN else " : "


def is_missing(value: Any) -> bool:
    """True for None and scalar NA values (NaN, NaT, pd.NA)."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like values are never "missing" as a whole
        return False


def coerce_value(value: Any, column_type: ColumnType) -> Any:
    """
    Convert a form value to the representation stored in the dataset.

    Values that cannot be converted become missing instead of raising.
    """
    column_type = ColumnType(column_type)

    if column_type is ColumnType.NUMERIC:
        if is_missing(value) or value == "":
            return np.nan
        try:
            return float(value) if not isinstance(value, (int, np.integer)) else int(value)
        except (TypeError, ValueError):
            logger.warning(f"Could not convert {value!r} to a number")
            return np.nan

    if column_type is ColumnType.BOOLEAN:
        if is_missing(value):
            return False
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    if column_type is ColumnType.DATE:
        parsed = parse_date_value(value, with_time=False)
        return parsed if parsed is not None else None

    if column_type is ColumnType.DATETIME:
        parsed = parse_date_value(value, with_time=True)
        return pd.Timestamp(parsed) if parsed is not None else pd.NaT

    if column_type is ColumnType.CATEGORICAL:
        # an unselected choice is a missing value, not a "" level
        if is_missing(value) or str(value).strip() == "":
            return None
        return str(value)

    if column_type is ColumnType.TEXT:
        return "" if is_missing(value) else str(value)

    return value


def parse_date_value(value: Any, with_time: bool) -> Any:
    """Parse a date or datetime pre-fill value; None when it cannot be parsed."""
    if is_missing(value) or value == "":
        return None

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()

    if isinstance(value, str):
        try:
            value = date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            logger.warning(f"Failed to parse date string '{value}': {e}")
            return None

    if isinstance(value, datetime):
        return value if with_time else value.date()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time()) if with_time else value

    logger.warning(f"Unexpected date value type: {type(value)}")
    return None

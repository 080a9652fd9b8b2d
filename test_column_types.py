"""
Unit tests for column type resolution.
"""

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from table_editor.column_types import (
    ColumnSpec,
    ColumnType,
    WidgetKind,
    categorical_choices,
    coerce_value,
    column_specs,
    empty_default,
    infer_column_type,
    is_missing,
    label_suffix,
    parse_date_value,
    resolve_widget_kind,
)


class TestInferColumnType:
    """Test cases for infer_column_type."""

    @pytest.mark.parametrize("series", [
        pd.Series([1, 2, 3]),
        pd.Series([1.5, np.nan]),
        pd.Series([1, None], dtype="Int64"),
    ])
    def test_numeric_columns(self, series):
        assert infer_column_type(series) is ColumnType.NUMERIC

    def test_boolean_before_numeric(self):
        assert infer_column_type(pd.Series([True, False])) is ColumnType.BOOLEAN
        assert infer_column_type(pd.Series([True, None], dtype="boolean")) is ColumnType.BOOLEAN

    def test_object_booleans(self):
        assert infer_column_type(pd.Series([True, False], dtype=object)) is ColumnType.BOOLEAN

    def test_categorical(self):
        series = pd.Series(pd.Categorical(["a", "b"], categories=["a", "b", "c"]))
        assert infer_column_type(series) is ColumnType.CATEGORICAL

    def test_text(self):
        assert infer_column_type(pd.Series(["x", "y"])) is ColumnType.TEXT
        assert infer_column_type(pd.Series(["x", None], dtype="string")) is ColumnType.TEXT
        assert infer_column_type(pd.Series([], dtype=object)) is ColumnType.TEXT

    def test_date_objects(self):
        series = pd.Series([date(2024, 1, 2), date(2024, 3, 4)])
        assert infer_column_type(series) is ColumnType.DATE

    def test_datetimes(self):
        series = pd.to_datetime(pd.Series(["2024-01-02 10:00", "2024-01-03 11:30"]))
        assert infer_column_type(series) is ColumnType.DATETIME

    def test_unrecognized(self):
        assert infer_column_type(pd.Series([[1], [2]])) is ColumnType.UNKNOWN
        assert infer_column_type(pd.Series(pd.to_timedelta([1, 2], unit="D"))) is ColumnType.UNKNOWN


class TestResolveWidgetKind:
    """Test cases for the type -> widget mapping."""

    @pytest.mark.parametrize("column_type, expected", [
        (ColumnType.NUMERIC, WidgetKind.NUMBER),
        (ColumnType.CATEGORICAL, WidgetKind.CATEGORICAL),
        (ColumnType.TEXT, WidgetKind.TEXT),
        (ColumnType.BOOLEAN, WidgetKind.BOOLEAN),
        (ColumnType.DATE, WidgetKind.DATE),
        (ColumnType.DATETIME, WidgetKind.DATETIME),
        (ColumnType.UNKNOWN, WidgetKind.NONE),
    ])
    def test_mapping(self, column_type, expected):
        assert resolve_widget_kind(column_type) is expected

    def test_accepts_string_values(self):
        assert resolve_widget_kind("numeric") is WidgetKind.NUMBER

    def test_column_spec_widget_kind(self):
        spec = ColumnSpec("col_1", "Age", ColumnType.NUMERIC)
        assert spec.widget_kind is WidgetKind.NUMBER


class TestCategoricalChoices:
    """Test cases for categorical_choices."""

    def test_union_of_values_and_levels_sorted(self):
        series = pd.Series(pd.Categorical(["ops", "data", "ops"], categories=["sales", "ops", "data"]))
        assert categorical_choices(series) == ["data", "ops", "sales"]

    def test_missing_values_excluded(self):
        series = pd.Series(pd.Categorical(["b", None], categories=["b", "a"]))
        assert categorical_choices(series) == ["a", "b"]

    def test_plain_column_uses_distinct_values(self):
        assert categorical_choices(pd.Series(["z", "a", "z"])) == ["a", "z"]


class TestDefaults:
    """Test cases for per-type empty defaults and label suffixes."""

    def test_empty_defaults(self):
        assert pd.isna(empty_default(ColumnType.NUMERIC))
        assert empty_default(ColumnType.TEXT) == ""
        assert empty_default(ColumnType.CATEGORICAL) == ""
        assert empty_default(ColumnType.BOOLEAN) is False
        assert empty_default(ColumnType.DATE) == date.today()
        assert isinstance(empty_default(ColumnType.DATETIME), datetime)
        assert empty_default(ColumnType.UNKNOWN) is None

    def test_boolean_has_no_suffix(self):
        assert label_suffix(ColumnType.BOOLEAN) == ""
        for column_type in (ColumnType.NUMERIC, ColumnType.TEXT, ColumnType.CATEGORICAL,
                            ColumnType.DATE, ColumnType.DATETIME):
            assert label_suffix(column_type) == " : "


class TestCoerceValue:
    """Test cases for coerce_value and helpers."""

    def test_numeric(self):
        assert coerce_value("3", ColumnType.NUMERIC) == 3.0
        assert coerce_value(4, ColumnType.NUMERIC) == 4
        assert np.isnan(coerce_value("", ColumnType.NUMERIC))
        assert np.isnan(coerce_value("abc", ColumnType.NUMERIC))
        assert np.isnan(coerce_value(None, ColumnType.NUMERIC))

    def test_boolean(self):
        assert coerce_value("true", ColumnType.BOOLEAN) is True
        assert coerce_value("no", ColumnType.BOOLEAN) is False
        assert coerce_value(None, ColumnType.BOOLEAN) is False
        assert coerce_value(1, ColumnType.BOOLEAN) is True

    def test_text(self):
        assert coerce_value(None, ColumnType.TEXT) == ""
        assert coerce_value(12, ColumnType.CATEGORICAL) == "12"

    def test_blank_categorical_is_missing(self):
        assert coerce_value("", ColumnType.CATEGORICAL) is None
        assert coerce_value("  ", ColumnType.CATEGORICAL) is None
        assert coerce_value(None, ColumnType.CATEGORICAL) is None
        assert coerce_value("", ColumnType.TEXT) == ""

    def test_dates(self):
        assert coerce_value("2024-01-02", ColumnType.DATE) == date(2024, 1, 2)
        assert coerce_value(datetime(2024, 1, 2, 5, 6), ColumnType.DATE) == date(2024, 1, 2)
        assert coerce_value("2024-01-02 10:30", ColumnType.DATETIME) == pd.Timestamp("2024-01-02 10:30")
        assert coerce_value("", ColumnType.DATETIME) is pd.NaT

    def test_parse_date_value(self):
        assert parse_date_value("not a date", with_time=False) is None
        assert parse_date_value(date(2024, 1, 2), with_time=True) == datetime(2024, 1, 2)
        assert parse_date_value(pd.Timestamp("2024-01-02 03:04"), with_time=True) == datetime(2024, 1, 2, 3, 4)

    def test_is_missing(self):
        assert is_missing(None)
        assert is_missing(np.nan)
        assert is_missing(pd.NA)
        assert is_missing(pd.NaT)
        assert not is_missing("")
        assert not is_missing([1, 2])


def test_column_specs_labels_positionally():
    data = pd.DataFrame({"col_1": ["a"], "col_2": [1]})

    specs = column_specs(data, ["Name", "Age"])

    assert specs == [
        ColumnSpec("col_1", "Name", ColumnType.TEXT),
        ColumnSpec("col_2", "Age", ColumnType.NUMERIC),
    ]

"""
Dynamic Pydantic model for validating a submitted row.

The model is built from the column specs of the editable columns; fields
whose display name is mandatory must be non-empty.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Type
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model, field_validator

from .column_types import ColumnSpec, ColumnType, is_missing

logger = logging.getLogger(__name__)

PYTHON_TYPES = {
    ColumnType.NUMERIC: float,
    ColumnType.CATEGORICAL: str,
    ColumnType.TEXT: str,
    ColumnType.BOOLEAN: bool,
    ColumnType.DATE: date,
    ColumnType.DATETIME: datetime,
}


def _require_value(cls, value: Any) -> Any:
    if is_missing(value):
        raise ValueError("Field is required")
    if isinstance(value, str) and not value.strip():
        raise ValueError("Field is required")
    return value


def create_row_model(specs: Iterable[ColumnSpec], mandatory: Iterable[str] = (),
                     model_name: str = "RowModel") -> Type[BaseModel]:
    """
    Create a Pydantic model for one row.

    Args:
        specs: Column specs of the editable columns
        mandatory: Display names of required fields
        model_name: Name for the generated model class

    Returns:
        Pydantic model class keyed by internal column name
    """
    mandatory = set(mandatory)
    model_fields: Dict[str, Any] = {}
    required_keys: List[str] = []

    for spec in specs:
        python_type = PYTHON_TYPES.get(spec.column_type)
        if python_type is None:
            continue
        if spec.label in mandatory:
            required_keys.append(spec.key)
            model_fields[spec.key] = (Optional[python_type], Field(default=None, description=spec.label,
                                                                   validate_default=True))
        else:
            model_fields[spec.key] = (Optional[python_type], Field(default=None, description=spec.label))

    validators = {}
    if required_keys:
        validators['require_mandatory'] = field_validator(*required_keys, mode='before')(_require_value)

    model = create_model(
        model_name,
        __config__=ConfigDict(extra='ignore'),
        __validators__=validators,
        **model_fields
    )
    logger.debug(f"Created row model '{model_name}' with {len(model_fields)} fields, "
                 f"{len(required_keys)} required")
    return model


def validate_row(model: Type[BaseModel], values: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate submitted values.

    NaN is sent as None so that optional numeric fields left empty pass.

    Returns:
        Mapping of internal column key to error message, empty when valid
    """
    cleaned = {key: (None if is_missing(value) else value) for key, value in values.items()}
    try:
        model(**cleaned)
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            loc = error.get('loc') or ('',)
            errors.setdefault(str(loc[0]), error.get('msg', 'Invalid value'))
        return errors
    return {}


def missing_mandatory(specs: Iterable[ColumnSpec], mandatory: Iterable[str],
                      values: Dict[str, Any]) -> List[str]:
    """Display names of mandatory fields left empty in values."""
    specs = list(specs)
    model = create_row_model(specs, mandatory)
    errors = validate_row(model, values)
    mandatory = set(mandatory)
    return [spec.label for spec in specs if spec.key in errors and spec.label in mandatory]

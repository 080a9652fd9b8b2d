"""
Custom exception classes for the editable table.

Expected edge cases (missing bookkeeping columns, unknown field types,
unmatched rename targets) never raise. These exceptions cover the few inputs
that are genuinely invalid.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class TableEditorError(Exception):
    """
    Base exception for editable table errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class ConfigurationLoadError(TableEditorError):
    """
    Exception raised when configuration file loading fails.

    This includes YAML parsing errors, permission issues, etc.
    """

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if config.yaml exists and is readable",
            "Verify YAML syntax is correct",
            "Application will use default configuration as fallback"
        ]

        super().__init__(message, context, recovery_suggestions)


class InvalidModalSizeError(TableEditorError):
    """Raised when a modal is opened with a size outside s/m/l/xl."""

    def __init__(self, modal_size: Any, allowed: List[str]):
        self.modal_size = modal_size
        message = f"Invalid modal size {modal_size!r}, expected one of {', '.join(allowed)}"
        super().__init__(
            message,
            {'modal_size': modal_size, 'allowed': list(allowed)},
            [f"Use one of: {', '.join(allowed)}"]
        )


class ColumnMappingError(TableEditorError):
    """
    Raised when display names cannot be mapped onto the dataset columns.

    Renaming is positional, so more display names than columns is an error.
    """

    def __init__(self, n_names: int, n_columns: int, message: Optional[str] = None):
        self.n_names = n_names
        self.n_columns = n_columns

        if message is None:
            message = f"Got {n_names} display names for {n_columns} columns"

        context = {
            'display_names': n_names,
            'columns': n_columns
        }

        recovery_suggestions = [
            "Pass one display name per caller-visible column",
            "Make sure bookkeeping columns are not counted as display columns"
        ]

        super().__init__(message, context, recovery_suggestions)

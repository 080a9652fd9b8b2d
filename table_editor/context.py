"""
Session-scoped state for one editable table.

Every operation receives an EditContext instead of reaching into global
session state. The context itself is kept in Streamlit's session state so
it survives reruns of the script.
"""

import streamlit as st
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

from .events import EventQueue, EventPriority

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_KEY = "table_editor"
DEFAULT_PAGE_SIZE = 10


@dataclass
class EditContext:
    """Dataset, event channel and page state for one table."""

    data: pd.DataFrame
    colnames: List[str]
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    events: EventQueue = field(default_factory=EventQueue)
    pending_edit: Optional[Dict[str, Any]] = None
    pending_delete: Optional[int] = None
    form_version: int = 0
    view: Any = None
    namespace: str = ""

    def ns(self, input_id: str) -> str:
        """Prefix an input id with the context namespace."""
        if not self.namespace:
            return input_id
        return f"{self.namespace}-{input_id}"

    def emit(self, name: str, value: Any = None,
             priority: EventPriority = EventPriority.EVENT) -> None:
        self.events.emit(name, value, priority)

    def set_data(self, data: pd.DataFrame) -> None:
        self.data = data
        logger.debug(f"[{self.namespace or 'table'}] dataset now has {len(data)} rows")


def get_edit_context(key: str = DEFAULT_CONTEXT_KEY,
                     factory: Optional[Callable[[], EditContext]] = None) -> EditContext:
    """
    Get the context stored under key, creating it with factory when absent.

    Raises:
        KeyError: If no context exists and no factory is given
    """
    if key not in st.session_state:
        if factory is None:
            raise KeyError(f"No edit context stored under {key!r}")
        st.session_state[key] = factory()
        logger.info(f"Edit context initialized: {key}")
    return st.session_state[key]


def reset_edit_context(key: str = DEFAULT_CONTEXT_KEY) -> None:
    """Forget the context stored under key."""
    if key in st.session_state:
        del st.session_state[key]
        logger.info(f"Edit context reset: {key}")

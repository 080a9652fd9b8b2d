"""
Per-row update/delete controls and the delete confirmation window.

Buttons are declarative: an ActionButton knows which event it emits and
for which row, and the event is bound through the button's on_click
callback when it is rendered.
"""

import streamlit as st
from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

from .context import EditContext
from .events import EventPriority
from .i18n import i18n

logger = logging.getLogger(__name__)

BUTTON_SIZE_PX = 40


@dataclass(frozen=True)
class ActionButton:
    """A clickable row control emitting event_name with row_id as value."""

    event_name: str
    row_id: Any
    variant: str
    icon: str
    title: str
    size: int = BUTTON_SIZE_PX
    priority: EventPriority = EventPriority.EVENT

    @property
    def key(self) -> str:
        return f"{self.event_name}_{self.row_id}"

    def click(self, ctx: EditContext) -> None:
        """Emit this button's event into the context."""
        ctx.emit(ctx.ns(self.event_name), self.row_id, self.priority)

    def render(self, ctx: EditContext, key_prefix: str = "") -> bool:
        """Draw the button; returns whether it was clicked in this run."""
        return st.button(
            "",
            key=ctx.ns(f"{key_prefix}{self.key}"),
            help=self.title,
            icon=self.icon,
            width=self.size,
            type="primary" if self.variant == "primary" else "secondary",
            on_click=self.click,
            args=(ctx,),
        )


def btn_update(input_id: str) -> Callable[[Any], ActionButton]:
    """Factory of update buttons: call the result with a row id."""
    def make(value: Any) -> ActionButton:
        return ActionButton(
            event_name=input_id,
            row_id=value,
            variant="primary",
            icon=":material/edit:",
            title=i18n("Click to edit"),
        )
    return make


def btn_delete(input_id: str) -> Callable[[Any], ActionButton]:
    """Factory of delete buttons: call the result with a row id."""
    def make(value: Any) -> ActionButton:
        return ActionButton(
            event_name=input_id,
            row_id=value,
            variant="danger",
            icon=":material/close:",
            title=i18n("Click to delete"),
        )
    return make


def confirmation_window(ctx: EditContext, input_id: str, title: Optional[str] = None,
                        message: Optional[str] = None) -> None:
    """
    Ask for confirmation before a destructive action.

    Yes emits {input_id}_yes, No emits {input_id}_no, Cancel closes the
    window without emitting anything.
    """
    @st.dialog(title or i18n("Confirmation"), width="medium")
    def confirm_dialog():
        if message:
            st.write(message)

        col1, col2, col3 = st.columns([1, 1, 1])
        with col1:
            if st.button(i18n("Cancel"), key=ctx.ns(f"{input_id}_cancel")):
                logger.debug(f"Confirmation {input_id} cancelled")
                st.rerun()
        with col2:
            if st.button(i18n("No"), key=ctx.ns(f"{input_id}_no")):
                ctx.emit(ctx.ns(f"{input_id}_no"), True, EventPriority.EVENT)
                st.rerun()
        with col3:
            if st.button(i18n("Yes"), key=ctx.ns(f"{input_id}_yes"), type="primary"):
                ctx.emit(ctx.ns(f"{input_id}_yes"), True, EventPriority.EVENT)
                st.rerun()

    confirm_dialog()

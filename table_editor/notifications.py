"""
Notification channels for the edit workflow.

Four severities (failure, warning, success, info), each shown as a toast
with a title and a body. Passing use_notify=False suppresses the toast
entirely.
"""

import streamlit as st
from streamlit.errors import StreamlitAPIException
import logging

from .config_loader import get_config_value

logger = logging.getLogger(__name__)

ICONS = {
    'failure': '❌',
    'warning': '⚠️',
    'success': '✅',
    'info': 'ℹ️'
}


class Notify:
    """
    Toast-first notification helper.

    Usage:
    Notify.show('success', "Row added", "The row was added to the table")
    """

    @staticmethod
    def format_message(title: str, text: str) -> str:
        if title and text:
            return f"**{title}**  \n{text}"
        return title or text or ""

    @staticmethod
    def show(severity: str, title: str, text: str, use_notify: bool = True) -> bool:
        """
        Display a notification of the given severity.

        Returns:
            True if a notification was displayed
        """
        if not use_notify:
            logger.debug(f"Notification suppressed ({severity}): {title}")
            return False

        icon = ICONS.get(severity, ICONS['info'])
        message = Notify.format_message(title, text)
        position = get_config_value('notifications', 'position', 'center-top')
        logger.debug(f"Notify {severity} at {position}: {title}")

        try:
            st.toast(message, icon=icon)
        except StreamlitAPIException as e:
            logger.error(f"Error using st.toast: {e}", exc_info=True)
            if severity == 'failure':
                st.error(message, icon=icon)
            elif severity == 'warning':
                st.warning(message, icon=icon)
            elif severity == 'success':
                st.success(message, icon=icon)
            else:
                st.info(message, icon=icon)
        return True


def notification_failure(title: str, text: str, use_notify: bool = True) -> bool:
    return Notify.show('failure', title, text, use_notify)


def notification_warning(title: str, text: str, use_notify: bool = True) -> bool:
    return Notify.show('warning', title, text, use_notify)


def notification_success(title: str, text: str, use_notify: bool = True) -> bool:
    return Notify.show('success', title, text, use_notify)


def notification_info(title: str, text: str, use_notify: bool = True) -> bool:
    return Notify.show('info', title, text, use_notify)

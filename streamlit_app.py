"""
Main Streamlit application for the editable table.
Shows a sample dataset that can be edited row by row through add/edit dialogs.
"""

import streamlit as st
from datetime import date, datetime
import logging

import pandas as pd

from table_editor.config_loader import configure_logging, load_config, get_config_value
from table_editor.context import get_edit_context, reset_edit_context
from table_editor.edit_data import EditDataController, create_edit_context
from table_editor.exceptions import TableEditorError
from table_editor.i18n import load_translations

# Configure logging dynamically from config
config = load_config()
configure_logging(config)
logger = logging.getLogger(__name__)
logger.info(f"Starting app version: {get_config_value('app', 'version', 'Unknown')}")

load_translations(config.get('i18n', {}).get('translations_file'))

st.set_page_config(
    page_title=config['app']['name'],
    page_icon="📋",
    layout="wide"
)

CONTEXT_KEY = "table_editor_demo"


def sample_data() -> pd.DataFrame:
    """Small dataset with one column of each editable type."""
    return pd.DataFrame({
        'Name': ['Anna', 'Bruno', 'Chen'],
        'Age': [34, 27, 45],
        'Team': pd.Categorical(['Data', 'Ops', 'Data'], categories=['Data', 'Ops', 'Sales']),
        'Active': [True, False, True],
        'Start date': [date(2021, 3, 1), date(2022, 9, 15), date(2019, 1, 7)],
        'Last login': pd.to_datetime(['2024-05-01 09:30', '2024-05-02 14:10', '2024-04-28 08:00']),
    })


def render_sidebar():
    """Render the editing options and return them."""
    with st.sidebar:
        st.header("Options")
        update = st.checkbox("Allow update", value=True, key="opt_update")
        delete = st.checkbox("Allow delete", value=True, key="opt_delete")
        mandatory = st.multiselect("Mandatory fields", list(sample_data().columns),
                                   default=['Name'], key="opt_mandatory")
        modal_size = st.selectbox("Modal size", ['s', 'm', 'l', 'xl'], index=1, key="opt_modal_size")
        easy_close = st.checkbox("Close modal on outside click", value=False, key="opt_easy_close")
        if st.button("Reset data"):
            reset_edit_context(CONTEXT_KEY)
    return {
        'update': update,
        'delete': delete,
        'var_mandatory': mandatory,
        'modal_size': modal_size,
        'modal_easy_close': easy_close,
    }


def main():
    """Main application entry point."""
    st.title(config['app']['name'])

    try:
        options = render_sidebar()
        ctx = get_edit_context(
            CONTEXT_KEY,
            lambda: create_edit_context(sample_data(), update=options['update'], delete=options['delete'])
        )
        controller = EditDataController(
            ctx,
            var_mandatory=options['var_mandatory'],
            update=options['update'],
            delete=options['delete'],
            modal_size=options['modal_size'],
            modal_easy_close=options['modal_easy_close'],
        )
        edited = controller.render()

        st.subheader("Returned data")
        st.dataframe(edited, hide_index=True)

    except TableEditorError as e:
        logger.error(f"Editable table error: {e}", exc_info=True)
        st.error(f"❌ {e.message}")
        for suggestion in e.recovery_suggestions:
            st.info(f"• {suggestion}")


if __name__ == "__main__":
    main()

"""
Unit tests for the add/update/delete workflow.
"""

from datetime import date
from types import SimpleNamespace
from unittest.mock import patch

import pandas as pd
import pytest

from table_editor.edit_data import (
    ADD_VALIDATE,
    CONFIRM_DELETE,
    UPDATE_VALIDATE,
    EditDataController,
    create_edit_context,
)
from table_editor.events import Event, EventPriority
from table_editor.row_mutator import DELETE_COLUMN, ID_COLUMN, UPDATE_COLUMN, update_row


@pytest.fixture
def people():
    return pd.DataFrame({
        "Name": ["Anna", "Bruno", "Chen"],
        "Age": [34, 27, 45],
        "Start": [date(2021, 3, 1), date(2022, 9, 15), date(2019, 1, 7)],
    })


@pytest.fixture
def ui():
    """Patch every Streamlit-facing collaborator of the controller."""
    with patch('table_editor.edit_data.open_edit_modal') as open_edit_modal, \
            patch('table_editor.edit_data.confirmation_window') as confirmation_window, \
            patch('table_editor.edit_data.notification_success') as notification_success, \
            patch('table_editor.edit_data.notification_failure') as notification_failure:
        yield SimpleNamespace(
            open_edit_modal=open_edit_modal,
            confirmation_window=confirmation_window,
            notification_success=notification_success,
            notification_failure=notification_failure,
        )


def make_controller(data, **kwargs):
    ctx = create_edit_context(data, namespace="people", page_size=10)
    kwargs.setdefault('use_notify', True)
    kwargs.setdefault('modal_size', 'm')
    kwargs.setdefault('modal_easy_close', False)
    return EditDataController(ctx, **kwargs)


class TestCreateEditContext:
    """Test cases for create_edit_context."""

    def test_prepares_data(self, people):
        ctx = create_edit_context(people, namespace="people", page_size=5)

        assert ctx.colnames == ["Name", "Age", "Start"]
        assert ctx.data[ID_COLUMN].tolist() == [1, 2, 3]
        assert ctx.page_size == 5
        assert ctx.ns("add") == "people-add"

    def test_page_size_from_config(self, people):
        with patch('table_editor.edit_data.get_config_value', return_value=25):
            ctx = create_edit_context(people)

        assert ctx.page_size == 25


class TestAddWorkflow:
    """Test cases for adding rows."""

    def test_add_button_opens_modal(self, people, ui):
        controller = make_controller(people, modal_size='l')
        controller.ctx.emit("people-add", True)

        controller.process_events()

        kwargs = ui.open_edit_modal.call_args.kwargs
        assert kwargs['id_validate'] == ADD_VALIDATE
        assert kwargs['title'] == "Add a row"
        assert kwargs['default'] == {}
        assert kwargs['modal_size'] == 'l'

    def test_custom_titles(self, people, ui):
        controller = make_controller(people, title_add="New person", title_update="Edit person")

        controller.handle(Event("people-add", True, EventPriority.EVENT))
        assert ui.open_edit_modal.call_args.kwargs['title'] == "New person"

        controller.handle(Event("people-update", 1, EventPriority.EVENT))
        assert ui.open_edit_modal.call_args.kwargs['title'] == "Edit person"

    def test_validate_adds_row(self, people, ui):
        controller = make_controller(people, update=True, delete=False)

        controller.handle(Event("people-add_row", {"col_1": "Dana", "col_2": 51.0, "col_3": date(2020, 5, 5)},
                                EventPriority.EVENT))

        result = controller.result()
        assert result["Name"].tolist() == ["Anna", "Bruno", "Chen", "Dana"]
        assert result["Age"].tolist() == [34, 27, 45, 51]
        assert controller.ctx.data[ID_COLUMN].tolist() == [1, 2, 3, 4]
        assert controller.ctx.form_version == 1
        ui.notification_success.assert_called_once_with("Registered", "Row has been saved", use_notify=True)

    def test_missing_mandatory_reopens_with_values(self, people, ui):
        controller = make_controller(people, var_mandatory=["Name"])
        values = {"col_1": "", "col_2": 51.0}

        controller.handle(Event("people-add_row", values, EventPriority.EVENT))

        assert len(controller.ctx.data) == 3
        assert controller.ctx.form_version == 1
        ui.notification_failure.assert_called_once()
        assert "Name" in ui.notification_failure.call_args.args[1]
        assert ui.open_edit_modal.call_args.kwargs['default'] == values
        ui.notification_success.assert_not_called()

    def test_mandatory_outside_editable_columns_ignored(self, people, ui):
        controller = make_controller(people, var_edit=["col_2"], var_mandatory=["Name"])

        controller.handle(Event("people-add_row", {"col_2": 51.0}, EventPriority.EVENT))

        assert len(controller.ctx.data) == 4
        ui.notification_failure.assert_not_called()

    def test_notifications_can_be_disabled(self, people, ui):
        controller = make_controller(people, use_notify=False)

        controller.handle(Event("people-add_row", {"col_1": "Dana"}, EventPriority.EVENT))

        assert ui.notification_success.call_args.kwargs['use_notify'] is False


class TestUpdateWorkflow:
    """Test cases for updating rows."""

    def test_update_opens_prefilled_modal(self, people, ui):
        controller = make_controller(people)
        controller.ctx.emit("people-update", 2)

        controller.process_events()

        kwargs = ui.open_edit_modal.call_args.kwargs
        assert kwargs['id_validate'] == UPDATE_VALIDATE
        assert kwargs['title'] == "Update a row"
        assert kwargs['default']["col_1"] == "Bruno"
        assert controller.ctx.pending_edit == {'row_id': 2}

    def test_validate_updates_pending_row(self, people, ui):
        controller = make_controller(people)
        controller.handle(Event("people-update", 2, EventPriority.EVENT))

        controller.handle(Event("people-update_row", {"col_1": "Bruna", "col_2": 28.0}, EventPriority.EVENT))

        result = controller.result()
        assert result["Name"].tolist() == ["Anna", "Bruna", "Chen"]
        assert result["Age"].tolist() == [34, 28, 45]
        assert controller.ctx.pending_edit is None
        ui.notification_success.assert_called_once()

    def test_unknown_row_does_not_open(self, people, ui):
        controller = make_controller(people)

        controller.handle(Event("people-update", 99, EventPriority.EVENT))

        ui.open_edit_modal.assert_not_called()
        assert controller.ctx.pending_edit is None

    def test_validate_without_pending_row(self, people, ui):
        controller = make_controller(people)

        controller.handle(Event("people-update_row", {"col_1": "X"}, EventPriority.EVENT))

        assert controller.result()["Name"].tolist() == ["Anna", "Bruno", "Chen"]
        ui.notification_success.assert_not_called()

    def test_update_missing_mandatory_keeps_pending(self, people, ui):
        controller = make_controller(people, var_mandatory=["Name"])
        controller.handle(Event("people-update", 1, EventPriority.EVENT))

        controller.handle(Event("people-update_row", {"col_1": " "}, EventPriority.EVENT))

        assert controller.ctx.pending_edit == {'row_id': 1}
        assert controller.result()["Name"].tolist()[0] == "Anna"
        assert ui.open_edit_modal.call_args.kwargs['id_validate'] == UPDATE_VALIDATE


class TestDeleteWorkflow:
    """Test cases for deleting rows."""

    def test_delete_asks_confirmation(self, people, ui):
        controller = make_controller(people)
        controller.ctx.emit("people-delete", 3)

        controller.process_events()

        ui.confirmation_window.assert_called_once()
        assert ui.confirmation_window.call_args.args[1] == CONFIRM_DELETE
        assert controller.ctx.pending_delete == 3

    def test_yes_deletes(self, people, ui):
        controller = make_controller(people)
        controller.handle(Event("people-delete", 3, EventPriority.EVENT))

        controller.handle(Event(f"people-{CONFIRM_DELETE}_yes", True, EventPriority.EVENT))

        assert controller.result()["Name"].tolist() == ["Anna", "Bruno"]
        assert controller.ctx.pending_delete is None
        ui.notification_success.assert_called_once_with(
            "Deleted successfully", "The row has been deleted", use_notify=True
        )

    def test_no_keeps_data(self, people, ui):
        controller = make_controller(people)
        controller.handle(Event("people-delete", 3, EventPriority.EVENT))

        controller.handle(Event(f"people-{CONFIRM_DELETE}_no", True, EventPriority.EVENT))

        assert len(controller.result()) == 3
        assert controller.ctx.pending_delete is None

    def test_yes_without_pending_row(self, people, ui):
        controller = make_controller(people)

        controller.handle(Event(f"people-{CONFIRM_DELETE}_yes", True, EventPriority.EVENT))

        assert len(controller.result()) == 3
        ui.notification_success.assert_not_called()


class TestProcessEvents:
    """Test cases for event dispatch."""

    def test_last_dialog_request_wins(self, people, ui):
        controller = make_controller(people)
        controller.ctx.emit("people-update", 1)
        controller.ctx.emit("people-delete", 2)

        events = controller.process_events()

        assert len(events) == 2
        ui.open_edit_modal.assert_not_called()
        ui.confirmation_window.assert_called_once()
        assert controller.ctx.pending_delete == 2

    def test_double_click_opens_once(self, people, ui):
        controller = make_controller(people)
        controller.ctx.emit("people-delete", 2)
        controller.ctx.emit("people-delete", 2)

        controller.process_events()

        ui.confirmation_window.assert_called_once()

    def test_other_namespace_ignored(self, people, ui):
        controller = make_controller(people)

        assert controller.handle(Event("other-add", True)) is False
        ui.open_edit_modal.assert_not_called()

    def test_queue_is_drained(self, people, ui):
        controller = make_controller(people)
        controller.ctx.emit("people-add", True)

        controller.process_events()

        assert len(controller.ctx.events) == 0


class TestActionToggles:
    """Test cases for switching update/delete after the data was prepared."""

    def test_disabling_update_hides_existing_controls(self, people, ui):
        controller = make_controller(people, update=False, delete=True)

        assert controller.sync_action_markers() is True

        assert controller.ctx.data[UPDATE_COLUMN].isna().all()
        assert controller.ctx.data[DELETE_COLUMN].tolist() == [1, 2, 3]
        assert not controller.ctx.view.is_shown(UPDATE_COLUMN)
        assert controller.ctx.view.is_shown(DELETE_COLUMN)

    def test_reenabling_keeps_edits(self, people, ui):
        ctx = create_edit_context(people, update=False, delete=False, page_size=10)
        ctx.set_data(update_row(ctx.data, 1, {"col_1": "Ann"}))
        controller = EditDataController(ctx, use_notify=False, modal_size='m', modal_easy_close=False)

        controller.sync_action_markers()

        assert ctx.data[UPDATE_COLUMN].tolist() == [1, 2, 3]
        assert ctx.data[DELETE_COLUMN].tolist() == [1, 2, 3]
        assert controller.result()["Name"].tolist() == ["Ann", "Bruno", "Chen"]

    def test_unchanged_options_do_nothing(self, people, ui):
        controller = make_controller(people)
        data = controller.ctx.data

        assert controller.sync_action_markers() is False
        assert controller.ctx.data is data

    def test_added_rows_follow_toggle(self, people, ui):
        controller = make_controller(people, delete=False)
        controller.sync_action_markers()

        controller.handle(Event("people-add_row", {"col_1": "Dana"}, EventPriority.EVENT))

        assert controller.ctx.data[DELETE_COLUMN].isna().all()
        assert controller.ctx.data[UPDATE_COLUMN].tolist() == [1, 2, 3, 4]


class TestResults:
    """Test cases for returned data."""

    def test_result_has_caller_schema(self, people, ui):
        controller = make_controller(people)

        pd.testing.assert_frame_equal(controller.result(), people)

    def test_internal_colnames(self, people, ui):
        controller = make_controller(people, internal_colnames=["col_2", "col_1"])

        result = controller.result()

        assert list(result.columns) == ["Age", "Name", "col_3"]
        assert result["Name"].tolist() == [34, 27, 45]

    def test_csv_bytes(self, people, ui):
        controller = make_controller(people)

        csv = controller.to_csv_bytes().decode('utf-8')

        assert csv.splitlines()[0] == "Name,Age,Start"
        assert csv.splitlines()[1] == "Anna,34,2021-03-01"

    @patch('table_editor.edit_data.render_table')
    @patch('streamlit.download_button')
    @patch('streamlit.button')
    def test_render(self, mock_button, mock_download_button, mock_render_table, people, ui):
        controller = make_controller(people)

        result = controller.render(key="people_table")

        add_kwargs = mock_button.call_args.kwargs
        assert add_kwargs['key'] == "people-people_table_add"
        assert add_kwargs['args'] == ("people-add", True)
        mock_render_table.assert_called_once()
        assert mock_download_button.call_args.kwargs['file_name'] == "data.csv"
        assert list(result.columns) == ["Name", "Age", "Start"]

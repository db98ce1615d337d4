"""MCP tools, called directly as plain functions."""

import json

import pytest

import eventkit_backend
import mcp_server
import store_gateway
from conftest import InMemoryBackend, RecordingScriptingBackend
from exceptions import BackendUnavailableError
from store_gateway import StoreGateway


def call(tool, *args, **kwargs):
    return json.loads(tool(*args, **kwargs))


def test_list_reminder_lists(gateway):
    assert call(mcp_server.list_reminder_lists) == {"lists": ["Work", "Backlog"]}


def test_ship_report_recurrence_scenario(gateway):
    assert call(
        mcp_server.set_recurrence, "Work", "Ship report", "weekly", interval=2, end_count=5
    ) == {"success": True, "message": 'Set recurrence "every 2 weeks" on reminder "Ship report"'}

    assert call(mcp_server.get_recurrence, "Work", "Ship report") == {
        "frequency": "weekly",
        "interval": 2,
        "endDate": None,
        "endCount": 5,
        "daysOfWeek": None,
    }


def test_get_reminder_full_schema(gateway):
    call(mcp_server.set_priority, "Work", "Ship report", 5)
    call(mcp_server.set_location, "Work", "Ship report", 35.0, 139.0, title="Office", proximity="leave")

    data = call(mcp_server.get_reminder, "Work", "Ship report")
    assert data["priority"] == 5
    assert data["hasLocation"] is True
    assert data["location"] == {
        "title": "Office",
        "latitude": 35.0,
        "longitude": 139.0,
        "radius": 100.0,
        "proximity": "leave",
    }
    assert data["recurrence"] is None


def test_add_and_list(gateway):
    result = call(mcp_server.add_reminder, "Backlog", "Buy milk", None, "2025-01-05 18:00")
    assert result["success"] is True
    reminders = call(mcp_server.get_reminders, "Backlog")["reminders"]
    assert reminders[0]["title"] == "Buy milk"
    assert reminders[0]["dueDate"] == "2025-01-05 18:00"


def test_update_without_fields(gateway):
    assert call(mcp_server.update_reminder, "Work", "Ship report") == {
        "success": False,
        "message": "No fields specified to update",
    }


@pytest.mark.parametrize("tool, args, expected", [
    (mcp_server.get_reminders, ("Nope",), "List not found: Nope"),
    (mcp_server.complete_reminder, ("Work", "Nope"), "Reminder not found: Nope"),
    (mcp_server.set_remind_date, ("Work", "Ship report", "tomorrow"),
     "Invalid date: tomorrow (expected format: yyyy-MM-dd HH:mm)"),
])
def test_errors_become_envelopes(gateway, tool, args, expected):
    assert call(tool, *args) == {"error": expected}


def test_invalid_frequency_names_the_value(gateway):
    error = call(mcp_server.set_recurrence, "Work", "Ship report", "hourly")["error"]
    assert error.startswith("Invalid frequency: hourly")


def test_flag_failure_carries_backend_text(gateway, scripting):
    scripting.diagnostic = "execution error: Reminders got an error (-1728)"
    assert call(mcp_server.set_flag, "Work", "Ship report", True) == {
        "error": "execution error: Reminders got an error (-1728)"
    }


def test_flag_and_clear(gateway, backend):
    assert call(mcp_server.set_flag, "Work", "Ship report", True)["message"] == 'Flagged reminder "Ship report"'
    assert call(mcp_server.clear_location, "Work", "Ship report")["success"] is True
    assert call(mcp_server.clear_recurrence, "Work", "Ship report")["success"] is True
    assert call(mcp_server.get_location, "Work", "Ship report") == {
        "success": True,
        "message": "No location alarm is set",
    }
    assert call(mcp_server.delete_reminder, "Work", "Ship report")["success"] is True
    assert backend.all_reminders("Work") == []


def test_access_denied_envelope():
    primary = InMemoryBackend()
    primary.add_list("Work")
    store_gateway.set_gateway(StoreGateway(primary, RecordingScriptingBackend(primary)))
    try:
        error = call(mcp_server.list_reminder_lists)["error"]
    finally:
        store_gateway.set_gateway(None)
    assert error.startswith("Access to Reminders was denied")


def test_missing_native_bridge_envelope(monkeypatch):
    class Unavailable:
        def __init__(self):
            raise BackendUnavailableError("no module named 'EventKit'")

    monkeypatch.setattr(eventkit_backend, "EventKitBackend", Unavailable)
    store_gateway.set_gateway(None)

    error = call(mcp_server.list_reminder_lists)["error"]
    assert error == "Reminders backend unavailable: no module named 'EventKit'"

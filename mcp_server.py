"""MCP Server for the Reminders bridge.

This module exposes reminder operations as MCP tools for AI agents. Each tool
call is one synchronous round trip to the live store.

Every tool returns JSON text: a value (lists, reminders, recurrence,
location), a {"success", "message"} envelope, or an {"error"} envelope.
Dates are "yyyy-MM-dd HH:mm" in local time.

Transport Support:
- stdio: Standard input/output (spawned by the agent; the default)
- sse: Server-Sent Events over HTTP (network access)
"""

import os
from typing import Callable, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel

import crud
import schemas
import store_gateway
from config import settings
from exceptions import RemindersError
from logger_config import setup_logger

logger = setup_logger(__name__, 'mcp.log')

mcp = FastMCP(
    "AppleReminders",
    host=settings.MCP_HOST,
    port=settings.MCP_PORT
)


def _respond(result: BaseModel) -> str:
    return result.model_dump_json(indent=2)


def _call(operation: Callable, *args, **kwargs) -> str:
    """Run a crud operation against the process gateway and encode the result."""
    try:
        gateway = store_gateway.get_gateway()
        return _respond(operation(gateway, *args, **kwargs))
    except RemindersError as e:
        logger.warning(f"✗ {operation.__name__} failed: {e}")
        return _respond(schemas.ErrorEnvelope(error=str(e)))


@mcp.tool()
def list_reminder_lists() -> str:
    """List the names of all reminder lists.

    Returns:
        {"lists": [name, ...]}
    """
    return _call(crud.list_lists)


@mcp.tool()
def get_reminders(list_name: str, include_completed: bool = False) -> str:
    """Get the reminders of a list.

    Args:
        list_name: List name (exact, case-sensitive)
        include_completed: Include completed reminders (default: False)

    Returns:
        {"reminders": [...]} with full details. If some reminder cannot be
        read in detail, {"reminders": [{"title": ...}], "simplified": true}.
    """
    return _call(crud.get_reminders, list_name, include_completed)


@mcp.tool()
def get_reminder(list_name: str, reminder_name: str) -> str:
    """Get one reminder with all its details.

    Args:
        list_name: List name
        reminder_name: Reminder title (first exact match is used)
    """
    return _call(crud.get_reminder, list_name, reminder_name)


@mcp.tool()
def add_reminder(
    list_name: str,
    title: str,
    body: Optional[str] = None,
    due_date: Optional[str] = None
) -> str:
    """Add a new reminder to a list.

    Args:
        list_name: List to add to
        title: Reminder title
        body: Optional notes
        due_date: Optional due date, e.g. "2024-03-15 17:00"
    """
    return _call(crud.create_reminder, list_name, title, body, due_date)


@mcp.tool()
def complete_reminder(list_name: str, reminder_name: str) -> str:
    """Mark a reminder as completed.

    Args:
        list_name: List name
        reminder_name: Reminder title
    """
    return _call(crud.complete_reminder, list_name, reminder_name)


@mcp.tool()
def delete_reminder(list_name: str, reminder_name: str) -> str:
    """Delete a reminder.

    Args:
        list_name: List name
        reminder_name: Title of the reminder to delete
    """
    return _call(crud.delete_reminder, list_name, reminder_name)


@mcp.tool()
def update_reminder(
    list_name: str,
    reminder_name: str,
    new_name: Optional[str] = None,
    new_body: Optional[str] = None,
    append_body: Optional[str] = None,
    new_due_date: Optional[str] = None
) -> str:
    """Update a reminder's title, notes or due date.

    Args:
        list_name: List name
        reminder_name: Title of the reminder to update
        new_name: Optional new title
        new_body: Optional notes, replacing the current ones
        append_body: Optional text appended to the notes on a new line
        new_due_date: Optional new due date, e.g. "2024-03-15 17:00"

    Returns:
        Success envelope; {"success": false} when no field was given
    """
    return _call(
        crud.update_reminder, list_name, reminder_name,
        new_name=new_name, new_body=new_body,
        append_body=append_body, new_due_date=new_due_date,
    )


@mcp.tool()
def set_priority(list_name: str, reminder_name: str, priority: int) -> str:
    """Set a reminder's priority.

    Args:
        list_name: List name
        reminder_name: Reminder title
        priority: 0=none, 1-3=high, 4-6=medium, 7-9=low (e.g. 1, 5, 9)
    """
    return _call(crud.set_priority, list_name, reminder_name, priority)


@mcp.tool()
def set_flag(list_name: str, reminder_name: str, flagged: bool) -> str:
    """Flag or unflag a reminder.

    Args:
        list_name: List name
        reminder_name: Reminder title
        flagged: True to flag, False to unflag
    """
    return _call(crud.set_flag, list_name, reminder_name, flagged)


@mcp.tool()
def set_remind_date(list_name: str, reminder_name: str, remind_date: str) -> str:
    """Set when a reminder alerts. Replaces any previous time alarm.

    Args:
        list_name: List name
        reminder_name: Reminder title
        remind_date: Alarm time, e.g. "2024-03-15 17:00"
    """
    return _call(crud.set_remind_date, list_name, reminder_name, remind_date)


@mcp.tool()
def get_recurrence(list_name: str, reminder_name: str) -> str:
    """Get a reminder's recurrence rule.

    Returns:
        {"frequency", "interval", "endDate", "endCount", "daysOfWeek"}, or a
        success envelope when the reminder does not repeat
    """
    return _call(crud.get_recurrence, list_name, reminder_name)


@mcp.tool()
def set_recurrence(
    list_name: str,
    reminder_name: str,
    frequency: str,
    interval: int = 1,
    end_count: Optional[int] = None,
    end_date: Optional[str] = None
) -> str:
    """Make a reminder repeat. Replaces any previous recurrence rule.

    Args:
        list_name: List name
        reminder_name: Reminder title
        frequency: "daily", "weekly", "monthly" or "yearly"
        interval: Repeat every N units (default 1; 2 = every other)
        end_count: Optional number of occurrences before stopping
        end_date: Optional last date, e.g. "2024-12-31 23:59"
    """
    return _call(
        crud.set_recurrence, list_name, reminder_name, frequency,
        interval=interval, end_count=end_count, end_date=end_date,
    )


@mcp.tool()
def clear_recurrence(list_name: str, reminder_name: str) -> str:
    """Stop a reminder from repeating."""
    return _call(crud.clear_recurrence, list_name, reminder_name)


@mcp.tool()
def get_location(list_name: str, reminder_name: str) -> str:
    """Get a reminder's location alarm.

    Returns:
        {"title", "latitude", "longitude", "radius", "proximity"}, or a
        success envelope when no location alarm is set
    """
    return _call(crud.get_location, list_name, reminder_name)


@mcp.tool()
def set_location(
    list_name: str,
    reminder_name: str,
    latitude: float,
    longitude: float,
    title: Optional[str] = None,
    radius: Optional[float] = None,
    proximity: Optional[str] = None
) -> str:
    """Alert when arriving at or leaving a place. Replaces any previous location alarm.

    Args:
        list_name: List name
        reminder_name: Reminder title
        latitude: Latitude of the place
        longitude: Longitude of the place
        title: Optional place name, e.g. "Office"
        radius: Geofence radius in meters (default 100)
        proximity: "enter" (on arrival, default) or "leave" (on departure)
    """
    return _call(
        crud.set_location, list_name, reminder_name, latitude, longitude,
        place=title, radius=radius, proximity=proximity,
    )


@mcp.tool()
def clear_location(list_name: str, reminder_name: str) -> str:
    """Remove a reminder's location alarm. Time alarms are kept."""
    return _call(crud.clear_location, list_name, reminder_name)


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", settings.MCP_TRANSPORT).lower()

    if transport == "sse":
        logger.info(f"Starting MCP server with SSE transport on {settings.MCP_HOST}:{settings.MCP_PORT}")
        logger.info(f"SSE endpoint: http://{settings.MCP_HOST}:{settings.MCP_PORT}/sse")
        mcp.run(transport="sse")
    else:
        # stdout carries the protocol; log lines go to stderr
        logger.info("Starting MCP server with stdio transport")
        mcp.run(transport="stdio")

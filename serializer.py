"""Reminder -> JSON schema conversion.

Only the first recurrence rule and the first location alarm are reported.
The bridge never writes more than one of each, but the store does not
enforce that, so a reminder edited elsewhere may carry several.
"""

from typing import Optional, Union

import resolver
import schemas
from exceptions import ProjectionError
from logger_config import setup_logger
from models import LocationAlarm, RecurrenceRule, Reminder, format_date
from store_gateway import StoreGateway

logger = setup_logger(__name__, 'serializer.log')


def recurrence_to_info(rule: RecurrenceRule) -> schemas.RecurrenceInfo:
    end_date = None
    end_count = None
    if rule.end is not None:
        if rule.end.until is not None:
            end_date = format_date(rule.end.until)
        if rule.end.count is not None and rule.end.count > 0:
            end_count = rule.end.count

    return schemas.RecurrenceInfo(
        frequency=rule.frequency.value,
        interval=rule.interval,
        endDate=end_date,
        endCount=end_count,
        daysOfWeek=list(rule.days_of_week) if rule.days_of_week else None,
    )


def location_to_info(alarm: LocationAlarm) -> schemas.LocationInfo:
    return schemas.LocationInfo(
        title=alarm.title,
        latitude=alarm.latitude,
        longitude=alarm.longitude,
        radius=alarm.radius_meters,
        proximity=alarm.proximity.value,
    )


def first_recurrence(reminder: Reminder) -> Optional[schemas.RecurrenceInfo]:
    if not reminder.recurrence_rules:
        return None
    return recurrence_to_info(reminder.recurrence_rules[0])


def first_location(reminder: Reminder) -> Optional[schemas.LocationInfo]:
    for alarm in reminder.alarms:
        if isinstance(alarm, LocationAlarm):
            return location_to_info(alarm)
    return None


def reminder_to_output(reminder: Reminder) -> schemas.ReminderOutput:
    recurrence = first_recurrence(reminder)
    location = first_location(reminder)
    return schemas.ReminderOutput(
        title=reminder.title,
        body=reminder.body,
        completed=reminder.completed,
        dueDate=format_date(reminder.due_date) if reminder.due_date else None,
        priority=reminder.priority,
        flagged=reminder.flagged,
        hasRecurrence=recurrence is not None,
        recurrence=recurrence,
        hasLocation=location is not None,
        location=location,
    )


def serialize_reminders(
    gateway: StoreGateway,
    list_name: str,
    include_completed: bool = False
) -> Union[schemas.RemindersOutput, schemas.SimplifiedRemindersOutput]:
    """Read a whole list, degrading to titles only if any item cannot be read.

    The degrade is all-or-nothing: one unreadable reminder switches the whole
    call to the simplified projection served by the scripting backend.
    """
    reminder_list = resolver.find_list(gateway, list_name)
    try:
        reminders = gateway.fetch_reminders(reminder_list, include_completed)
        return schemas.RemindersOutput(reminders=[reminder_to_output(r) for r in reminders])
    except ProjectionError as e:
        logger.warning(f"Detailed read of '{list_name}' failed ({e}), falling back to titles")

    titles = gateway.list_titles(reminder_list, include_completed)
    return schemas.SimplifiedRemindersOutput(
        reminders=[schemas.ReminderTitleOutput(title=t) for t in titles]
    )

"""Reminder operations for the Reminders bridge.

Every mutation follows the same pipeline: validate arguments, resolve the
target against the live store, apply a pure transform to the fetched
snapshot, save. Arguments are checked before any store round-trip, so
invalid input never costs an access to the store.

Mutations return a SuccessEnvelope; reads return output schemas. Failures
are raised as RemindersError subclasses and turned into envelopes by the
calling surface.
"""

from dataclasses import replace
from typing import Optional, Union

import resolver
import schemas
import serializer
from config import settings
from exceptions import InvalidValueError
from logger_config import setup_logger
from models import (
    Frequency,
    LocationAlarm,
    Proximity,
    RecurrenceEnd,
    RecurrenceRule,
    Reminder,
    parse_date,
    priority_label,
)
from store_gateway import StoreGateway

logger = setup_logger(__name__, 'crud.log')

NO_FIELDS_MESSAGE = "No fields specified to update"


def _ok(message: str) -> schemas.SuccessEnvelope:
    return schemas.SuccessEnvelope(success=True, message=message)


# ============================================================
# Lists and reads
# ============================================================

def list_lists(gateway: StoreGateway) -> schemas.ListsOutput:
    return schemas.ListsOutput(lists=[l.name for l in gateway.list_all()])


def get_reminders(
    gateway: StoreGateway,
    list_name: str,
    include_completed: bool = False
) -> Union[schemas.RemindersOutput, schemas.SimplifiedRemindersOutput]:
    return serializer.serialize_reminders(gateway, list_name, include_completed)


def get_reminder(gateway: StoreGateway, list_name: str, title: str) -> schemas.ReminderOutput:
    reminder = resolver.find_reminder(gateway, list_name, title)
    return serializer.reminder_to_output(reminder)


# ============================================================
# CRUD
# ============================================================

def create_reminder(
    gateway: StoreGateway,
    list_name: str,
    title: str,
    body: Optional[str] = None,
    due_date: Optional[str] = None
) -> schemas.SuccessEnvelope:
    """Create a reminder in a list.

    Args:
        gateway: Store gateway
        list_name: Target list (exact name)
        title: Reminder title
        body: Optional notes
        due_date: Optional due date, "yyyy-MM-dd HH:mm"

    Raises:
        InvalidDateError, ListNotFoundError, SaveFailedError
    """
    logger.info(f"📝 Creating reminder: {title} | List: {list_name} | Due: {due_date}")
    due = parse_date(due_date) if due_date is not None else None
    reminder_list = resolver.find_list(gateway, list_name)

    gateway.save(Reminder(
        title=title,
        list_name=reminder_list.name,
        body=body,
        due_date=due,
    ))
    return _ok(f'Added reminder "{title}" to "{list_name}"')


def complete_reminder(gateway: StoreGateway, list_name: str, title: str) -> schemas.SuccessEnvelope:
    logger.info(f"✅ Completing reminder: {title} | List: {list_name}")
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.completed_copy())
    return _ok(f'Marked reminder "{title}" as completed')


def delete_reminder(gateway: StoreGateway, list_name: str, title: str) -> schemas.SuccessEnvelope:
    logger.info(f"🗑 Deleting reminder: {title} | List: {list_name}")
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.remove(target)
    return _ok(f'Deleted reminder "{title}"')


def update_reminder(
    gateway: StoreGateway,
    list_name: str,
    title: str,
    new_name: Optional[str] = None,
    new_body: Optional[str] = None,
    append_body: Optional[str] = None,
    new_due_date: Optional[str] = None
) -> schemas.SuccessEnvelope:
    """Update title, notes and/or due date.

    Only supplied (non-None) fields change. ``append_body`` adds a new line
    to the notes on every call, so it is not idempotent. With no field
    supplied the store is not touched and success=False is returned.
    """
    if new_name is None and new_body is None and append_body is None and new_due_date is None:
        logger.info(f"📝 Update of {title} skipped: no fields")
        return schemas.SuccessEnvelope(success=False, message=NO_FIELDS_MESSAGE)

    logger.info(f"📝 Updating reminder: {title} | List: {list_name}")
    due = parse_date(new_due_date) if new_due_date is not None else None
    target = resolver.find_reminder(gateway, list_name, title)

    updated = target
    if new_name is not None:
        updated = replace(updated, title=new_name)
    if new_body is not None:
        updated = replace(updated, body=new_body)
    if append_body is not None:
        updated = replace(updated, body=(updated.body or "") + "\n" + append_body)
    if due is not None:
        updated = replace(updated, due_date=due)

    gateway.save(updated)
    return _ok(f'Updated reminder "{title}"')


# ============================================================
# Properties
# ============================================================

def set_priority(gateway: StoreGateway, list_name: str, title: str, priority: int) -> schemas.SuccessEnvelope:
    logger.info(f"📝 Setting priority of {title} to {priority}")
    if isinstance(priority, bool) or not isinstance(priority, int) or not 0 <= priority <= 9:
        raise InvalidValueError("priority", priority, "an integer from 0 to 9")

    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(replace(target, priority=priority))
    return _ok(f'Set priority of reminder "{title}" to "{priority_label(priority)}"')


def set_flag(gateway: StoreGateway, list_name: str, title: str, flagged: bool) -> schemas.SuccessEnvelope:
    """Flag or unflag a reminder through the scripting backend.

    The reminder is addressed by name inside the scripting query itself;
    failures carry the backend's own diagnostic text.
    """
    logger.info(f"🚩 Setting flag of {title} to {flagged}")
    gateway.set_flag(list_name, title, bool(flagged))
    if flagged:
        return _ok(f'Flagged reminder "{title}"')
    return _ok(f'Unflagged reminder "{title}"')


def set_remind_date(gateway: StoreGateway, list_name: str, title: str, remind_date: str) -> schemas.SuccessEnvelope:
    """Replace the reminder's time alarms with one alarm at ``remind_date``."""
    logger.info(f"⏰ Setting alarm of {title} to {remind_date}")
    trigger_at = parse_date(remind_date)
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.with_time_alarm(trigger_at))
    return _ok(f'Set alarm for reminder "{title}" to "{remind_date}"')


# ============================================================
# Recurrence
# ============================================================

def get_recurrence(
    gateway: StoreGateway,
    list_name: str,
    title: str
) -> Union[schemas.RecurrenceInfo, schemas.SuccessEnvelope]:
    target = resolver.find_reminder(gateway, list_name, title)
    info = serializer.first_recurrence(target)
    if info is None:
        return _ok("No recurrence rule is set")
    return info


def set_recurrence(
    gateway: StoreGateway,
    list_name: str,
    title: str,
    frequency: str,
    interval: int = 1,
    end_count: Optional[int] = None,
    end_date: Optional[str] = None
) -> schemas.SuccessEnvelope:
    """Replace all recurrence rules with a single new rule.

    When both end conditions are given, ``end_count`` wins; ``end_date``
    must still be a valid date.
    """
    logger.info(f"🔁 Setting recurrence of {title}: {frequency} x{interval}")
    freq = Frequency.parse(frequency)
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise InvalidValueError("interval", interval, "an integer of at least 1")
    if end_count is not None and (isinstance(end_count, bool) or not isinstance(end_count, int) or end_count < 1):
        raise InvalidValueError("end_count", end_count, "an integer of at least 1")
    until = parse_date(end_date) if end_date is not None else None

    end = None
    if end_count is not None:
        end = RecurrenceEnd(count=end_count)
    elif until is not None:
        end = RecurrenceEnd(until=until)
    rule = RecurrenceRule(frequency=freq, interval=interval, end=end)

    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.with_recurrence(rule))
    return _ok(f'Set recurrence "{rule.label()}" on reminder "{title}"')


def clear_recurrence(gateway: StoreGateway, list_name: str, title: str) -> schemas.SuccessEnvelope:
    logger.info(f"🔁 Clearing recurrence of {title}")
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.without_recurrence())
    return _ok(f'Cleared recurrence rules from reminder "{title}"')


# ============================================================
# Location
# ============================================================

def get_location(
    gateway: StoreGateway,
    list_name: str,
    title: str
) -> Union[schemas.LocationInfo, schemas.SuccessEnvelope]:
    target = resolver.find_reminder(gateway, list_name, title)
    info = serializer.first_location(target)
    if info is None:
        return _ok("No location alarm is set")
    return info


def set_location(
    gateway: StoreGateway,
    list_name: str,
    title: str,
    latitude: float,
    longitude: float,
    place: Optional[str] = None,
    radius: Optional[float] = None,
    proximity: Optional[str] = None
) -> schemas.SuccessEnvelope:
    """Replace the reminder's location alarms with one geofence alarm.

    Time alarms are kept.
    """
    logger.info(f"📍 Setting location of {title}: ({latitude}, {longitude})")
    trigger = Proximity.parse(proximity if proximity is not None else settings.DEFAULT_PROXIMITY)
    radius = settings.DEFAULT_LOCATION_RADIUS if radius is None else radius
    if not radius > 0:
        raise InvalidValueError("radius", radius, "greater than 0")
    if not -90 <= latitude <= 90:
        raise InvalidValueError("latitude", latitude, "between -90 and 90")
    if not -180 <= longitude <= 180:
        raise InvalidValueError("longitude", longitude, "between -180 and 180")

    alarm = LocationAlarm(
        latitude=float(latitude),
        longitude=float(longitude),
        radius_meters=float(radius),
        proximity=trigger,
        title=place,
    )
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.with_location_alarm(alarm))

    where = place or f"{latitude}, {longitude}"
    when = "on arrival" if trigger is Proximity.ENTER else "on departure"
    return _ok(f'Set location alarm on reminder "{title}" ({where} - {when})')


def clear_location(gateway: StoreGateway, list_name: str, title: str) -> schemas.SuccessEnvelope:
    """Remove location alarms only; time alarms stay."""
    logger.info(f"📍 Clearing location of {title}")
    target = resolver.find_reminder(gateway, list_name, title)
    gateway.save(target.without_location_alarms())
    return _ok(f'Cleared location alarms from reminder "{title}"')

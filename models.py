"""Entity model for the Reminders bridge.

Lists, reminders, alarms and recurrence rules as immutable values. The store
owns every entity; instances here are snapshots taken for a single operation.
Mutations are pure transforms returning new snapshots which the gateway then
writes back.

IMPORTANT: all datetimes are naive and interpreted in local time, matching the
fixed "yyyy-MM-dd HH:mm" text format used on the wire.
"""

import enum
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple, Union

from exceptions import InvalidDateError, InvalidEnumError

DATE_FORMAT = "%Y-%m-%d %H:%M"
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}")


def parse_date(text: str) -> datetime:
    """Parse "yyyy-MM-dd HH:mm" into a naive local datetime.

    Raises:
        InvalidDateError: if the text does not match the format exactly
    """
    if text is None or not _DATE_PATTERN.fullmatch(text.strip()):
        raise InvalidDateError(text)
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT)
    except ValueError:
        raise InvalidDateError(text) from None


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def priority_label(priority: int) -> str:
    """Display bucket for a 0-9 priority: 0=none, 1-3=high, 4-6=medium, 7-9=low."""
    if priority == 0:
        return "none"
    if priority <= 3:
        return "high"
    if priority <= 6:
        return "medium"
    return "low"


class Frequency(enum.Enum):
    """Recurrence frequencies"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, text: str) -> "Frequency":
        try:
            return cls((text or "").strip().lower())
        except ValueError:
            raise InvalidEnumError("frequency", text, [f.value for f in cls]) from None


class Proximity(enum.Enum):
    """Location alarm trigger direction.

    NONE only appears when reading: the store can hold a location alarm
    without a direction, but this layer never writes one.
    """
    NONE = "none"
    ENTER = "enter"
    LEAVE = "leave"

    @classmethod
    def parse(cls, text: str) -> "Proximity":
        value = (text or "").strip().lower()
        if value not in (cls.ENTER.value, cls.LEAVE.value):
            raise InvalidEnumError("proximity", text, [cls.ENTER.value, cls.LEAVE.value])
        return cls(value)


@dataclass(frozen=True)
class ReminderList:
    name: str


@dataclass(frozen=True)
class TimeAlarm:
    trigger_at: datetime


@dataclass(frozen=True)
class LocationAlarm:
    latitude: float
    longitude: float
    radius_meters: float
    proximity: Proximity
    title: Optional[str] = None


Alarm = Union[TimeAlarm, LocationAlarm]


@dataclass(frozen=True)
class RecurrenceEnd:
    """End condition of a recurrence rule: after a count, or at a date."""
    count: Optional[int] = None
    until: Optional[datetime] = None


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    interval: int = 1
    end: Optional[RecurrenceEnd] = None
    # 1=Sunday ... 7=Saturday; read from the store, never written by this layer
    days_of_week: Optional[Tuple[int, ...]] = None

    def label(self) -> str:
        if self.interval == 1:
            return self.frequency.value
        unit = {
            Frequency.DAILY: "days",
            Frequency.WEEKLY: "weeks",
            Frequency.MONTHLY: "months",
            Frequency.YEARLY: "years",
        }[self.frequency]
        return f"every {self.interval} {unit}"


@dataclass(frozen=True)
class Reminder:
    """Snapshot of one reminder.

    ``identifier`` is the store's handle for the entity; it is None for a
    reminder that has not been saved yet. ``flagged`` is always False when
    read through the primary backend, which has no flag field.
    """
    title: str
    list_name: str
    body: Optional[str] = None
    completed: bool = False
    due_date: Optional[datetime] = None
    priority: int = 0
    flagged: bool = False
    alarms: Tuple[Alarm, ...] = field(default_factory=tuple)
    recurrence_rules: Tuple[RecurrenceRule, ...] = field(default_factory=tuple)
    identifier: Optional[str] = None

    @property
    def time_alarms(self) -> Tuple[TimeAlarm, ...]:
        return tuple(a for a in self.alarms if isinstance(a, TimeAlarm))

    @property
    def location_alarms(self) -> Tuple[LocationAlarm, ...]:
        return tuple(a for a in self.alarms if isinstance(a, LocationAlarm))

    # Transforms. Each returns a new snapshot; single-instance invariants
    # (one time alarm, one location alarm, one rule) hold by construction.

    def completed_copy(self) -> "Reminder":
        return replace(self, completed=True)

    def with_time_alarm(self, trigger_at: datetime) -> "Reminder":
        kept = tuple(a for a in self.alarms if not isinstance(a, TimeAlarm))
        return replace(self, alarms=kept + (TimeAlarm(trigger_at),))

    def with_location_alarm(self, alarm: LocationAlarm) -> "Reminder":
        return replace(self, alarms=self.without_location_alarms().alarms + (alarm,))

    def without_location_alarms(self) -> "Reminder":
        kept = tuple(a for a in self.alarms if not isinstance(a, LocationAlarm))
        return replace(self, alarms=kept)

    def with_recurrence(self, rule: RecurrenceRule) -> "Reminder":
        return replace(self, recurrence_rules=(rule,))

    def without_recurrence(self) -> "Reminder":
        return replace(self, recurrence_rules=())

from datetime import datetime

import pytest

from exceptions import InvalidDateError, InvalidEnumError
from models import (
    Frequency,
    LocationAlarm,
    Proximity,
    RecurrenceEnd,
    RecurrenceRule,
    Reminder,
    TimeAlarm,
    format_date,
    parse_date,
    priority_label,
)


def test_parse_date_fixed_format():
    assert parse_date("2024-03-15 09:05") == datetime(2024, 3, 15, 9, 5)
    assert format_date(datetime(2024, 3, 15, 9, 5)) == "2024-03-15 09:05"


@pytest.mark.parametrize("text", [
    "2024-03-15",
    "2024-03-15T09:00",
    "15/03/2024 09:00",
    "2024-3-5 9:00",
    "2024-02-30 10:00",
    "2024-03-15 09:00+09:00",
    "",
])
def test_parse_date_rejects_other_formats(text):
    with pytest.raises(InvalidDateError) as exc_info:
        parse_date(text)
    assert "yyyy-MM-dd HH:mm" in str(exc_info.value)


@pytest.mark.parametrize("priority, label", [
    (0, "none"), (1, "high"), (3, "high"), (4, "medium"), (6, "medium"), (7, "low"), (9, "low"),
])
def test_priority_label_buckets(priority, label):
    assert priority_label(priority) == label


def test_frequency_parse_is_case_insensitive():
    assert Frequency.parse("Weekly") is Frequency.WEEKLY
    with pytest.raises(InvalidEnumError) as exc_info:
        Frequency.parse("hourly")
    assert exc_info.value.field == "frequency"
    assert exc_info.value.value == "hourly"


def test_proximity_parse_refuses_none():
    assert Proximity.parse("LEAVE") is Proximity.LEAVE
    with pytest.raises(InvalidEnumError):
        Proximity.parse("none")


def test_recurrence_label():
    assert RecurrenceRule(Frequency.DAILY).label() == "daily"
    assert RecurrenceRule(Frequency.WEEKLY, interval=2).label() == "every 2 weeks"
    assert RecurrenceRule(Frequency.MONTHLY, interval=3, end=RecurrenceEnd(count=4)).label() == "every 3 months"


def test_alarm_transforms_replace_by_kind():
    place = LocationAlarm(35.0, 139.0, 50.0, Proximity.LEAVE, "Office")
    reminder = Reminder(
        title="Ship report",
        list_name="Work",
        alarms=(TimeAlarm(datetime(2024, 1, 1, 9, 0)), place, TimeAlarm(datetime(2024, 1, 2, 9, 0))),
    )

    with_alarm = reminder.with_time_alarm(datetime(2024, 2, 1, 8, 0))
    assert with_alarm.time_alarms == (TimeAlarm(datetime(2024, 2, 1, 8, 0)),)
    assert with_alarm.location_alarms == (place,)

    cleared = with_alarm.without_location_alarms()
    assert cleared.location_alarms == ()
    assert cleared.time_alarms == with_alarm.time_alarms

    # the original snapshot is untouched
    assert len(reminder.alarms) == 3


def test_recurrence_transforms_keep_a_single_rule():
    reminder = Reminder(
        title="Ship report",
        list_name="Work",
        recurrence_rules=(RecurrenceRule(Frequency.DAILY), RecurrenceRule(Frequency.YEARLY)),
    )
    rule = RecurrenceRule(Frequency.WEEKLY, interval=2)
    assert reminder.with_recurrence(rule).recurrence_rules == (rule,)
    assert reminder.without_recurrence().recurrence_rules == ()

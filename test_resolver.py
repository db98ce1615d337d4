import pytest

import resolver
from exceptions import ListNotFoundError, ProjectionError, ReminderNotFoundError
from models import Reminder


def test_find_list_exact_name(gateway):
    assert resolver.find_list(gateway, "Work").name == "Work"


@pytest.mark.parametrize("name", ["work", "Work ", "Wor"])
def test_find_list_has_no_fuzzy_matching(gateway, name):
    with pytest.raises(ListNotFoundError) as exc_info:
        resolver.find_list(gateway, name)
    assert exc_info.value.name == name


def test_find_reminder_returns_requested_title(gateway, backend):
    backend.add(Reminder(title="Plan sprint", list_name="Work"))
    for title in ("Ship report", "Plan sprint"):
        assert resolver.find_reminder(gateway, "Work", title).title == title


def test_find_reminder_includes_completed(gateway, backend):
    backend.add(Reminder(title="Archive", list_name="Work", completed=True))
    assert resolver.find_reminder(gateway, "Work", "Archive").completed


def test_find_reminder_first_match_in_store_order(gateway, backend):
    first = backend.add(Reminder(title="Dup", list_name="Work", body="first"))
    backend.add(Reminder(title="Dup", list_name="Work", body="second"))
    assert resolver.find_reminder(gateway, "Work", "Dup").identifier == first.identifier


def test_find_reminder_missing(gateway):
    with pytest.raises(ReminderNotFoundError):
        resolver.find_reminder(gateway, "Work", "ship report")
    with pytest.raises(ListNotFoundError):
        resolver.find_reminder(gateway, "Home", "Ship report")


def test_find_reminder_skips_unreadable_siblings(gateway, backend):
    backend.add(Reminder(title="Broken", list_name="Work"))
    backend.unreadable.add("Broken")
    assert resolver.find_reminder(gateway, "Work", "Ship report").title == "Ship report"


def test_find_reminder_unreadable_target_still_fails(gateway, backend):
    backend.add(Reminder(title="Broken", list_name="Work"))
    backend.unreadable.add("Broken")
    with pytest.raises(ProjectionError):
        resolver.find_reminder(gateway, "Work", "Broken")

"""Name-based lookup of lists and reminders against the live store.

Known limitation: the store does not keep reminder titles unique. When
several reminders in a list share a title, find_reminder returns the first
one in store iteration order. That order is whatever the store yields; it is
not "most recent" or "oldest".
"""

from exceptions import ListNotFoundError, ReminderNotFoundError
from models import Reminder, ReminderList
from store_gateway import StoreGateway


def find_list(gateway: StoreGateway, name: str) -> ReminderList:
    """First list whose name equals ``name`` exactly (case-sensitive)."""
    for reminder_list in gateway.list_all():
        if reminder_list.name == name:
            return reminder_list
    raise ListNotFoundError(name)


def find_reminder(gateway: StoreGateway, list_name: str, title: str) -> Reminder:
    """First reminder in the list whose title equals ``title`` exactly.

    Completed reminders are included so they stay addressable.

    Raises:
        ListNotFoundError, ReminderNotFoundError
    """
    reminder_list = find_list(gateway, list_name)
    # Only reminders with this title are projected; unreadable siblings are skipped
    for reminder in gateway.fetch_reminders(reminder_list, include_completed=True, title=title):
        if reminder.title == title:
            return reminder
    raise ReminderNotFoundError(title)

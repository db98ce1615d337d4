"""Shared fixtures: an in-memory reminder store behind the real gateway."""

import itertools
import os
import tempfile
from dataclasses import replace
from typing import Dict, List, Optional

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="reminders-logs-"))

import pytest

import store_gateway
from exceptions import ListNotFoundError, ProjectionError, ReminderNotFoundError, ScriptingError
from models import Reminder, ReminderList
from store_gateway import StoreGateway


class InMemoryBackend:
    """Primary backend double keeping reminders per list in insertion order."""

    def __init__(self, grant: bool = True):
        self.grant = grant
        self.lists: Dict[str, List[Reminder]] = {}
        self.unreadable = set()
        self.saves = 0
        self.removes = 0
        self._ids = itertools.count(1)

    def add_list(self, name: str) -> None:
        self.lists.setdefault(name, [])

    def add(self, reminder: Reminder) -> Reminder:
        self.add_list(reminder.list_name)
        stored = replace(reminder, identifier=f"id-{next(self._ids)}")
        self.lists[reminder.list_name].append(stored)
        return stored

    def all_reminders(self, list_name: str) -> List[Reminder]:
        return list(self.lists[list_name])

    def request_access(self) -> bool:
        return self.grant

    def list_all(self) -> List[ReminderList]:
        return [ReminderList(name=n) for n in self.lists]

    def fetch_reminders(self, list_name: str, include_completed: bool, title: Optional[str] = None) -> List[Reminder]:
        if list_name not in self.lists:
            raise ListNotFoundError(list_name)
        items = [r for r in self.lists[list_name] if include_completed or not r.completed]
        if title is not None:
            items = [r for r in items if r.title == title]
        for r in items:
            if r.title in self.unreadable:
                raise ProjectionError(r.title, "due date is not available")
        return items

    def _locate(self, identifier: str):
        for name, items in self.lists.items():
            for index, r in enumerate(items):
                if r.identifier == identifier:
                    return name, index
        raise ReminderNotFoundError(identifier)

    def save(self, reminder: Reminder) -> Reminder:
        self.saves += 1
        if reminder.identifier is None:
            return self.add(reminder)
        name, index = self._locate(reminder.identifier)
        self.lists[name][index] = reminder
        return reminder

    def remove(self, reminder: Reminder) -> None:
        self.removes += 1
        name, index = self._locate(reminder.identifier)
        del self.lists[name][index]


class RecordingScriptingBackend:
    """Scripting backend double operating on the same in-memory store."""

    def __init__(self, primary: InMemoryBackend):
        self.primary = primary
        self.calls = []
        self.diagnostic = None

    def set_flag(self, list_name: str, title: str, flagged: bool) -> None:
        self.calls.append(("set_flag", list_name, title, flagged))
        if self.diagnostic:
            raise ScriptingError(self.diagnostic)
        items = self.primary.lists[list_name]
        for index, r in enumerate(items):
            if r.title == title:
                items[index] = replace(r, flagged=flagged)
                return

    def list_titles(self, list_name: str, include_completed: bool) -> List[str]:
        self.calls.append(("list_titles", list_name, include_completed))
        return [
            r.title for r in self.primary.lists[list_name]
            if include_completed or not r.completed
        ]


@pytest.fixture
def backend():
    store = InMemoryBackend()
    store.add_list("Work")
    store.add_list("Backlog")
    store.add(Reminder(title="Ship report", list_name="Work"))
    return store


@pytest.fixture
def scripting(backend):
    return RecordingScriptingBackend(backend)


@pytest.fixture
def gateway(backend, scripting):
    gw = StoreGateway(backend, scripting)
    gw.request_access()
    store_gateway.set_gateway(gw)
    yield gw
    store_gateway.set_gateway(None)

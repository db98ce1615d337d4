import threading
import time

import pytest

import crud
import store_gateway
from conftest import InMemoryBackend, RecordingScriptingBackend
from exceptions import AccessDeniedError, BackendUnavailableError
from models import Reminder, ReminderList
from store_gateway import ROUTES, Backend, StoreGateway


def test_routes_send_flags_and_titles_to_scripting():
    assert ROUTES["set_flag"] is Backend.SCRIPTING
    assert ROUTES["list_titles"] is Backend.SCRIPTING
    for operation in ("list_all", "fetch_reminders", "save", "remove"):
        assert ROUTES[operation] is Backend.PRIMARY


def test_operations_fail_closed_before_access():
    primary = InMemoryBackend()
    primary.add_list("Work")
    gw = StoreGateway(primary, RecordingScriptingBackend(primary))

    with pytest.raises(AccessDeniedError):
        gw.list_all()
    with pytest.raises(AccessDeniedError):
        gw.save(Reminder(title="x", list_name="Work"))
    with pytest.raises(AccessDeniedError):
        gw.set_flag("Work", "x", True)
    assert primary.saves == 0


def test_refused_access_raises_and_stays_closed():
    primary = InMemoryBackend(grant=False)
    gw = StoreGateway(primary, RecordingScriptingBackend(primary))

    with pytest.raises(AccessDeniedError) as exc_info:
        gw.request_access()
    assert "System Settings" in str(exc_info.value)
    assert gw.access_granted is False
    with pytest.raises(AccessDeniedError):
        gw.fetch_reminders(ReminderList("Work"), False)


def test_denied_access_surfaces_through_operations():
    primary = InMemoryBackend()
    primary.add_list("Work")
    gw = StoreGateway(primary, RecordingScriptingBackend(primary))
    with pytest.raises(AccessDeniedError):
        crud.create_reminder(gw, "Work", "Buy milk")


def test_backend_for_picks_route(gateway, backend, scripting):
    assert gateway.backend_for("save") is backend
    assert gateway.backend_for("set_flag") is scripting


def test_get_gateway_returns_installed_gateway(gateway):
    assert store_gateway.get_gateway() is gateway


def test_get_gateway_propagates_missing_native_bridge(monkeypatch):
    import eventkit_backend

    class Unavailable:
        def __init__(self):
            raise BackendUnavailableError("no PyObjC")

    monkeypatch.setattr(eventkit_backend, "EventKitBackend", Unavailable)
    store_gateway.set_gateway(None)

    with pytest.raises(BackendUnavailableError):
        store_gateway.get_gateway()
    # not cached; a later call tries again
    with pytest.raises(BackendUnavailableError):
        store_gateway.get_gateway()


def test_get_gateway_builds_once_under_concurrent_first_use(monkeypatch):
    import eventkit_backend

    built = []

    class SlowBackend(InMemoryBackend):
        def __init__(self):
            super().__init__()
            built.append(self)
            time.sleep(0.05)

    monkeypatch.setattr(eventkit_backend, "EventKitBackend", SlowBackend)
    store_gateway.set_gateway(None)

    results = []
    threads = [threading.Thread(target=lambda: results.append(store_gateway.get_gateway())) for _ in range(4)]
    try:
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    finally:
        store_gateway.set_gateway(None)

    assert len(built) == 1
    assert len(results) == 4
    assert all(gw is results[0] for gw in results)

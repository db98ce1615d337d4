"""Store gateway for the Reminders bridge.

Single boundary between the operations and the reminder store. Two backends
sit behind it:

- primary: EventKit, full entity model except flags
- scripting: AppleScript, used only where the primary backend lacks a feature

Which backend serves an operation is fixed in ROUTES; there is no runtime
capability probing. Nothing is cached: every read goes to the live store and
every write commits immediately.
"""

import enum
import threading
from typing import List, Optional

from exceptions import AccessDeniedError
from logger_config import setup_logger
from models import Reminder, ReminderList

logger = setup_logger(__name__, 'gateway.log')


class Backend(enum.Enum):
    """Backends available to the gateway"""
    PRIMARY = "primary"
    SCRIPTING = "scripting"


ROUTES = {
    "list_all": Backend.PRIMARY,
    "fetch_reminders": Backend.PRIMARY,
    "save": Backend.PRIMARY,
    "remove": Backend.PRIMARY,
    "set_flag": Backend.SCRIPTING,      # no flag field in EventKit
    "list_titles": Backend.SCRIPTING,   # simplified projection for bulk reads
}


class StoreGateway:
    """Routes store operations to the backend that serves them.

    Access fails closed: until request_access() has succeeded, every
    operation raises AccessDeniedError.
    """

    def __init__(self, primary, scripting):
        self.primary = primary
        self.scripting = scripting
        self.access_granted = False

    def request_access(self) -> None:
        """Request store access. Raises AccessDeniedError when refused."""
        granted = self.primary.request_access()
        if not granted:
            self.access_granted = False
            logger.warning("Reminders access denied")
            raise AccessDeniedError(
                "grant permission in System Settings > Privacy & Security > Reminders"
            )
        self.access_granted = True
        logger.info("Reminders access granted")

    def backend_for(self, operation: str):
        self._require_access()
        route = ROUTES[operation]
        return self.primary if route is Backend.PRIMARY else self.scripting

    def _require_access(self) -> None:
        if not self.access_granted:
            raise AccessDeniedError()

    def list_all(self) -> List[ReminderList]:
        return self.backend_for("list_all").list_all()

    def fetch_reminders(
        self,
        reminder_list: ReminderList,
        include_completed: bool,
        title: Optional[str] = None
    ) -> List[Reminder]:
        """Reminders of a list; with ``title``, only those carrying that exact title."""
        return self.backend_for("fetch_reminders").fetch_reminders(
            reminder_list.name, include_completed, title
        )

    def save(self, reminder: Reminder) -> Reminder:
        return self.backend_for("save").save(reminder)

    def remove(self, reminder: Reminder) -> None:
        self.backend_for("remove").remove(reminder)

    def set_flag(self, list_name: str, title: str, flagged: bool) -> None:
        self.backend_for("set_flag").set_flag(list_name, title, flagged)

    def list_titles(self, reminder_list: ReminderList, include_completed: bool) -> List[str]:
        return self.backend_for("list_titles").list_titles(reminder_list.name, include_completed)


_gateway: Optional[StoreGateway] = None
_gateway_lock = threading.Lock()


def get_gateway() -> StoreGateway:
    """Process-wide gateway, created and granted access on first use.

    A refused access request is not remembered, so the next call asks again.
    """
    global _gateway
    with _gateway_lock:
        if _gateway is None:
            # Imported here so the service imports on hosts without PyObjC
            from applescript_backend import AppleScriptBackend
            from eventkit_backend import EventKitBackend

            gateway = StoreGateway(EventKitBackend(), AppleScriptBackend())
            gateway.request_access()
            _gateway = gateway
        return _gateway


def set_gateway(gateway: Optional[StoreGateway]) -> None:
    """Install a gateway (embedding, tests). None resets to lazy creation."""
    global _gateway
    with _gateway_lock:
        _gateway = gateway

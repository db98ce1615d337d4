"""EventKit backend for the Reminders bridge.

Structured access to the Reminders store through PyObjC's EventKit bridge.
Supports the full entity model except flags.

The PyObjC frameworks are imported when the backend is constructed, so the
rest of the service stays importable on hosts without them.

Callback-style EventKit calls (access request, fetch) are turned into one
blocking call each: the completion handler sets a threading.Event and the
caller pumps the current run loop until it fires.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from exceptions import (
    BackendUnavailableError,
    FetchFailedError,
    ListNotFoundError,
    ProjectionError,
    ReminderNotFoundError,
    SaveFailedError,
)
from logger_config import setup_logger
from models import (
    Frequency,
    LocationAlarm,
    Proximity,
    RecurrenceEnd,
    RecurrenceRule,
    Reminder,
    ReminderList,
    TimeAlarm,
)

logger = setup_logger(__name__, 'backend.log')


class EventKitBackend:
    """Primary backend: EKEventStore wrapped in entity-model terms."""

    def __init__(self):
        try:
            import CoreLocation
            import EventKit
            import Foundation
            import objc
        except ImportError as e:
            raise BackendUnavailableError(
                f"EventKit is not available ({e}). On macOS install "
                "pyobjc-framework-EventKit and pyobjc-framework-CoreLocation."
            ) from e

        self._bind(EventKit, Foundation, CoreLocation, (objc.error,))

    def _bind(self, EventKit, Foundation, CoreLocation, native_errors=()) -> None:
        """Attach the framework bridges and build the constant tables."""
        self._ek = EventKit
        self._foundation = Foundation
        self._location = CoreLocation
        self._native_errors = tuple(native_errors) + (AttributeError, TypeError, ValueError, OverflowError)
        self.store = EventKit.EKEventStore.alloc().init()

        self._frequency_from_native: Dict[int, Frequency] = {
            int(EventKit.EKRecurrenceFrequencyDaily): Frequency.DAILY,
            int(EventKit.EKRecurrenceFrequencyWeekly): Frequency.WEEKLY,
            int(EventKit.EKRecurrenceFrequencyMonthly): Frequency.MONTHLY,
            int(EventKit.EKRecurrenceFrequencyYearly): Frequency.YEARLY,
        }
        self._frequency_to_native = {v: k for k, v in self._frequency_from_native.items()}
        self._proximity_to_native: Dict[Proximity, int] = {
            Proximity.NONE: int(EventKit.EKAlarmProximityNone),
            Proximity.ENTER: int(EventKit.EKAlarmProximityEnter),
            Proximity.LEAVE: int(EventKit.EKAlarmProximityLeave),
        }
        self._proximity_from_native = {v: k for k, v in self._proximity_to_native.items()}

    # ----------------------------------------
    # Access and run loop plumbing
    # ----------------------------------------

    def _wait(self, done: threading.Event) -> None:
        run_loop = self._foundation.NSRunLoop.currentRunLoop()
        while not done.is_set():
            run_loop.runUntilDate_(self._foundation.NSDate.dateWithTimeIntervalSinceNow_(0.1))

    def request_access(self) -> bool:
        """Ask for full access to reminders. The first call may show a system prompt."""
        done = threading.Event()
        outcome = {"granted": False, "error": None}

        def completion(granted, error):
            outcome["granted"] = bool(granted)
            outcome["error"] = error
            done.set()

        if self.store.respondsToSelector_("requestFullAccessToRemindersWithCompletion:"):
            self.store.requestFullAccessToRemindersWithCompletion_(completion)
        else:
            self.store.requestAccessToEntityType_completion_(
                self._ek.EKEntityTypeReminder, completion
            )
        self._wait(done)

        if outcome["error"] is not None:
            logger.warning(f"Access request returned an error: {self._describe(outcome['error'])}")
        return outcome["granted"]

    # ----------------------------------------
    # Lists and fetches
    # ----------------------------------------

    def _calendars(self) -> List[Any]:
        return list(self.store.calendarsForEntityType_(self._ek.EKEntityTypeReminder) or [])

    def _find_calendar(self, name: str) -> Any:
        for calendar in self._calendars():
            if str(calendar.title()) == name:
                return calendar
        raise ListNotFoundError(name)

    def list_all(self) -> List[ReminderList]:
        return [ReminderList(name=str(c.title())) for c in self._calendars()]

    def fetch_reminders(
        self,
        list_name: str,
        include_completed: bool,
        title: Optional[str] = None
    ) -> List[Reminder]:
        """Project the reminders of a list.

        With ``title`` only native reminders carrying that exact title are
        projected, so a sibling that cannot be read does not fail the call.
        """
        calendar = self._find_calendar(list_name)
        predicate = self.store.predicateForRemindersInCalendars_([calendar])

        done = threading.Event()
        box = {}

        def completion(reminders):
            box["reminders"] = reminders
            done.set()

        self.store.fetchRemindersMatchingPredicate_completion_(predicate, completion)
        self._wait(done)

        natives = box.get("reminders")
        if natives is None:
            raise FetchFailedError()
        if not include_completed:
            natives = [r for r in natives if not r.isCompleted()]
        if title is not None:
            natives = [r for r in natives if str(r.title() or "") == title]
        return [self._project(r, list_name) for r in natives]

    # ----------------------------------------
    # Save / remove
    # ----------------------------------------

    def _lookup(self, reminder: Reminder) -> Any:
        native = self.store.calendarItemWithIdentifier_(reminder.identifier)
        if native is None:
            raise ReminderNotFoundError(reminder.title)
        return native

    def save(self, reminder: Reminder) -> Reminder:
        """Create or update the native reminder to match the snapshot."""
        if reminder.identifier is None:
            native = self._ek.EKReminder.reminderWithEventStore_(self.store)
            native.setCalendar_(self._find_calendar(reminder.list_name))
        else:
            native = self._lookup(reminder)

        native.setTitle_(reminder.title)
        native.setNotes_(reminder.body)
        native.setCompleted_(reminder.completed)
        native.setPriority_(reminder.priority)

        # Rebuilding unchanged components would turn all-day dates into midnight
        if self._components_to_datetime(native.dueDateComponents()) != reminder.due_date:
            native.setDueDateComponents_(
                self._datetime_to_components(reminder.due_date) if reminder.due_date else None
            )

        self._sync_alarms(native, reminder.alarms)
        self._sync_rules(native, reminder.recurrence_rules)

        ok, error = self.store.saveReminder_commit_error_(native, True, None)
        if not ok:
            raise SaveFailedError(self._describe(error))
        return replace(reminder, identifier=str(native.calendarItemIdentifier()))

    def remove(self, reminder: Reminder) -> None:
        native = self._lookup(reminder)
        ok, error = self.store.removeReminder_commit_error_(native, True, None)
        if not ok:
            raise SaveFailedError(self._describe(error))

    def _sync_alarms(self, native: Any, alarms) -> None:
        # Alarms this layer does not model (relative offsets) project to None
        # and are left in place.
        wanted = list(alarms)
        for existing in list(native.alarms() or []):
            projected = self._project_alarm(existing)
            if projected is None:
                continue
            if projected in wanted:
                wanted.remove(projected)
            else:
                native.removeAlarm_(existing)
        for alarm in wanted:
            native.addAlarm_(self._build_alarm(alarm))

    def _sync_rules(self, native: Any, rules) -> None:
        wanted = list(rules)
        for existing in list(native.recurrenceRules() or []):
            projected = self._project_rule(existing)
            if projected in wanted:
                wanted.remove(projected)
            else:
                native.removeRecurrenceRule_(existing)
        for rule in wanted:
            native.addRecurrenceRule_(self._build_rule(rule))

    # ----------------------------------------
    # Native -> entity model
    # ----------------------------------------

    def _project(self, native: Any, list_name: str) -> Reminder:
        title = str(native.title() or "")
        try:
            alarms = tuple(
                a for a in (self._project_alarm(x) for x in (native.alarms() or []))
                if a is not None
            )
            rules = tuple(self._project_rule(r) for r in (native.recurrenceRules() or []))
            notes = native.notes()
            return Reminder(
                title=title,
                list_name=list_name,
                body=str(notes) if notes is not None else None,
                completed=bool(native.isCompleted()),
                due_date=self._components_to_datetime(native.dueDateComponents()),
                priority=int(native.priority()),
                flagged=False,
                alarms=alarms,
                recurrence_rules=rules,
                identifier=str(native.calendarItemIdentifier()),
            )
        except self._native_errors as e:
            raise ProjectionError(title, str(e)) from e

    def _project_alarm(self, alarm: Any) -> Optional[Any]:
        location = alarm.structuredLocation()
        if location is not None and location.geoLocation() is not None:
            coordinate = location.geoLocation().coordinate()
            place = location.title()
            return LocationAlarm(
                latitude=float(coordinate.latitude),
                longitude=float(coordinate.longitude),
                radius_meters=float(location.radius()),
                proximity=self._proximity_from_native.get(int(alarm.proximity()), Proximity.NONE),
                title=str(place) if place else None,
            )
        absolute = alarm.absoluteDate()
        if absolute is not None:
            return TimeAlarm(self._nsdate_to_datetime(absolute))
        return None

    def _project_rule(self, rule: Any) -> RecurrenceRule:
        frequency = self._frequency_from_native.get(int(rule.frequency()))
        if frequency is None:
            raise ValueError(f"unsupported recurrence frequency {rule.frequency()}")

        end = None
        native_end = rule.recurrenceEnd()
        if native_end is not None:
            if native_end.endDate() is not None:
                end = RecurrenceEnd(until=self._nsdate_to_datetime(native_end.endDate()))
            elif native_end.occurrenceCount() > 0:
                end = RecurrenceEnd(count=int(native_end.occurrenceCount()))

        days = rule.daysOfTheWeek()
        return RecurrenceRule(
            frequency=frequency,
            interval=int(rule.interval()),
            end=end,
            days_of_week=tuple(int(d.dayOfTheWeek()) for d in days) if days else None,
        )

    # ----------------------------------------
    # Entity model -> native
    # ----------------------------------------

    def _build_alarm(self, alarm) -> Any:
        if isinstance(alarm, TimeAlarm):
            return self._ek.EKAlarm.alarmWithAbsoluteDate_(self._datetime_to_nsdate(alarm.trigger_at))

        location = self._ek.EKStructuredLocation.locationWithTitle_(alarm.title or "")
        location.setGeoLocation_(
            self._location.CLLocation.alloc().initWithLatitude_longitude_(
                alarm.latitude, alarm.longitude
            )
        )
        location.setRadius_(alarm.radius_meters)
        native = self._ek.EKAlarm.alloc().init()
        native.setStructuredLocation_(location)
        native.setProximity_(self._proximity_to_native[alarm.proximity])
        return native

    def _build_rule(self, rule: RecurrenceRule) -> Any:
        end = None
        if rule.end is not None and rule.end.count is not None:
            end = self._ek.EKRecurrenceEnd.recurrenceEndWithOccurrenceCount_(rule.end.count)
        elif rule.end is not None and rule.end.until is not None:
            end = self._ek.EKRecurrenceEnd.recurrenceEndWithEndDate_(
                self._datetime_to_nsdate(rule.end.until)
            )

        frequency = self._frequency_to_native[rule.frequency]
        if rule.days_of_week:
            days = [self._ek.EKRecurrenceDayOfWeek.dayOfWeek_(d) for d in rule.days_of_week]
            return self._ek.EKRecurrenceRule.alloc().initRecurrenceWithFrequency_interval_daysOfTheWeek_daysOfTheMonth_monthsOfTheYear_weeksOfTheYear_daysOfTheYear_setPositions_end_(
                frequency, rule.interval, days, None, None, None, None, None, end
            )
        return self._ek.EKRecurrenceRule.alloc().initRecurrenceWithFrequency_interval_end_(
            frequency, rule.interval, end
        )

    # ----------------------------------------
    # Date conversion
    # ----------------------------------------

    def _nsdate_to_datetime(self, value: Any) -> datetime:
        return datetime.fromtimestamp(float(value.timeIntervalSince1970()))

    def _datetime_to_nsdate(self, value: datetime) -> Any:
        return self._foundation.NSDate.dateWithTimeIntervalSince1970_(value.timestamp())

    def _components_to_datetime(self, components: Any) -> Optional[datetime]:
        if components is None:
            return None
        date = self._foundation.NSCalendar.currentCalendar().dateFromComponents_(components)
        if date is None:
            return None
        return self._nsdate_to_datetime(date)

    def _datetime_to_components(self, value: datetime) -> Any:
        components = self._foundation.NSDateComponents.alloc().init()
        components.setYear_(value.year)
        components.setMonth_(value.month)
        components.setDay_(value.day)
        components.setHour_(value.hour)
        components.setMinute_(value.minute)
        return components

    @staticmethod
    def _describe(error: Any) -> str:
        if error is None:
            return "unknown error"
        return str(error.localizedDescription())

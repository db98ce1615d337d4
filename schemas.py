"""Pydantic schemas for the Reminders bridge.

Output schemas define the stable JSON consumed by the calling agent. Field
names are the wire names (camelCase) and every optional field is emitted as
null rather than omitted.

Request schemas are the REST bodies. They only check types; range and enum
checks live in crud so both surfaces report the same errors.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================
# Output schemas
# ============================================================

class RecurrenceInfo(BaseModel):
    """Recurrence rule as reported to the agent."""

    frequency: str = Field(..., description="daily, weekly, monthly or yearly")
    interval: int = Field(..., description="Repeat every N frequency units")
    endDate: Optional[str] = Field(None, description="Last occurrence (yyyy-MM-dd HH:mm)")
    endCount: Optional[int] = Field(None, description="Number of occurrences before the rule ends")
    daysOfWeek: Optional[List[int]] = Field(None, description="Weekdays, 1=Sunday ... 7=Saturday")


class LocationInfo(BaseModel):
    """Location alarm as reported to the agent."""

    title: Optional[str] = Field(None, description="Place name")
    latitude: float
    longitude: float
    radius: float = Field(..., description="Geofence radius in meters")
    proximity: str = Field(..., description="enter, leave or none")


class ReminderOutput(BaseModel):
    """One reminder in the canonical JSON schema."""

    title: str
    body: Optional[str] = None
    completed: bool
    dueDate: Optional[str] = Field(None, description="yyyy-MM-dd HH:mm, local time")
    priority: int = Field(..., description="0=none, 1-3=high, 4-6=medium, 7-9=low")
    flagged: bool
    hasRecurrence: bool
    recurrence: Optional[RecurrenceInfo] = None
    hasLocation: bool
    location: Optional[LocationInfo] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Ship report",
                "body": "Q3 numbers",
                "completed": False,
                "dueDate": "2025-03-15 09:00",
                "priority": 1,
                "flagged": False,
                "hasRecurrence": True,
                "recurrence": {
                    "frequency": "weekly",
                    "interval": 2,
                    "endDate": None,
                    "endCount": 5,
                    "daysOfWeek": None,
                },
                "hasLocation": False,
                "location": None,
            }
        }


class ReminderTitleOutput(BaseModel):
    """Simplified projection: title only."""

    title: str


class ListsOutput(BaseModel):
    lists: List[str]


class RemindersOutput(BaseModel):
    reminders: List[ReminderOutput]


class SimplifiedRemindersOutput(BaseModel):
    """Bulk read result when the detailed projection failed."""

    reminders: List[ReminderTitleOutput]
    simplified: bool = True


class SuccessEnvelope(BaseModel):
    """Result of a mutation. success=False is a non-error "nothing done"."""

    success: bool
    message: str


class ErrorEnvelope(BaseModel):
    error: str


# ============================================================
# Request schemas (REST)
# ============================================================

class ReminderCreate(BaseModel):
    title: str = Field(..., min_length=1, description="Reminder title")
    body: Optional[str] = Field(None, description="Notes")
    due_date: Optional[str] = Field(None, description="Due date (yyyy-MM-dd HH:mm)")


class ReminderUpdate(BaseModel):
    """All fields are optional - only provided fields will be updated."""

    new_name: Optional[str] = Field(None, description="New title")
    new_body: Optional[str] = Field(None, description="Replace the notes")
    append_body: Optional[str] = Field(None, description="Append a line to the notes")
    new_due_date: Optional[str] = Field(None, description="New due date (yyyy-MM-dd HH:mm)")


class PriorityUpdate(BaseModel):
    priority: int = Field(..., description="0=none, 1-3=high, 4-6=medium, 7-9=low")


class FlagUpdate(BaseModel):
    flagged: bool


class RemindDateUpdate(BaseModel):
    remind_date: str = Field(..., description="Alarm time (yyyy-MM-dd HH:mm)")


class RecurrenceSet(BaseModel):
    frequency: str = Field(..., description="daily, weekly, monthly or yearly")
    interval: int = Field(1, description="Repeat every N frequency units")
    end_count: Optional[int] = Field(None, description="Stop after N occurrences")
    end_date: Optional[str] = Field(None, description="Stop at this date (yyyy-MM-dd HH:mm)")


class LocationSet(BaseModel):
    latitude: float
    longitude: float
    title: Optional[str] = Field(None, description="Place name")
    radius: Optional[float] = Field(None, description="Geofence radius in meters")
    proximity: Optional[str] = Field(None, description="enter or leave")

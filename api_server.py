"""FastAPI REST API server for the Reminders bridge.

HTTP mirror of the MCP tools, for local tooling and scripts. Lists and
reminders are addressed by name in the path; the same resolution rules
apply (exact match, first reminder with the title wins).

Errors are returned as {"error": message} with a status derived from the
error type.
"""

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

import crud
import schemas
import store_gateway
from config import settings
from exceptions import (
    VALIDATION_ERRORS,
    AccessDeniedError,
    ListNotFoundError,
    ReminderNotFoundError,
    RemindersError,
)
from logger_config import setup_logger
from store_gateway import StoreGateway

logger = setup_logger(__name__, 'api.log')

app = FastAPI(
    title="Apple Reminders Bridge API",
    description="Name-addressed access to the macOS Reminders store",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


def status_for(error: RemindersError) -> int:
    if isinstance(error, (ListNotFoundError, ReminderNotFoundError)):
        return 404
    if isinstance(error, AccessDeniedError):
        return 403
    if isinstance(error, VALIDATION_ERRORS):
        return 422
    # Store and backend failures
    return 502


@app.exception_handler(RemindersError)
async def reminders_error_handler(request: Request, exc: RemindersError):
    logger.warning(f"✗ {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_for(exc),
        content=schemas.ErrorEnvelope(error=str(exc)).model_dump()
    )


@app.get("/")
def root():
    """Root endpoint - service information"""
    return {
        "service": "Apple Reminders Bridge API",
        "version": "1.0.0",
        "status": "healthy",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "lists": "/lists"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "reminders_bridge",
        "mcp_transport": settings.MCP_TRANSPORT
    }


@app.get("/lists", response_model=schemas.ListsOutput)
def list_lists(gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    """Names of all reminder lists."""
    return crud.list_lists(gateway)


@app.get("/lists/{list_name}/reminders")
def get_reminders(
    list_name: str,
    include_completed: bool = Query(False, description="Include completed reminders"),
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    """Reminders of a list.

    Returns {"reminders": [...]} or, when some reminder cannot be read in
    detail, the simplified {"reminders": [{"title"}], "simplified": true}.
    """
    return crud.get_reminders(gateway, list_name, include_completed)


@app.post("/lists/{list_name}/reminders", response_model=schemas.SuccessEnvelope, status_code=201)
def create_reminder(
    list_name: str,
    reminder: schemas.ReminderCreate,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    """Create a reminder.

    Request body example:
    ```json
    {"title": "Ship report", "body": "Q3 numbers", "due_date": "2025-03-15 09:00"}
    ```
    """
    return crud.create_reminder(gateway, list_name, reminder.title, reminder.body, reminder.due_date)


@app.get("/lists/{list_name}/reminders/{title}", response_model=schemas.ReminderOutput)
def get_reminder(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.get_reminder(gateway, list_name, title)


@app.patch("/lists/{list_name}/reminders/{title}", response_model=schemas.SuccessEnvelope)
def update_reminder(
    list_name: str,
    title: str,
    updates: schemas.ReminderUpdate,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    """Update a reminder. Only provided fields are changed.

    An empty body is not an error: it returns {"success": false}.
    """
    return crud.update_reminder(gateway, list_name, title, **updates.model_dump())


@app.delete("/lists/{list_name}/reminders/{title}", response_model=schemas.SuccessEnvelope)
def delete_reminder(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.delete_reminder(gateway, list_name, title)


@app.post("/lists/{list_name}/reminders/{title}/complete", response_model=schemas.SuccessEnvelope)
def complete_reminder(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.complete_reminder(gateway, list_name, title)


@app.put("/lists/{list_name}/reminders/{title}/priority", response_model=schemas.SuccessEnvelope)
def set_priority(
    list_name: str,
    title: str,
    body: schemas.PriorityUpdate,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    return crud.set_priority(gateway, list_name, title, body.priority)


@app.put("/lists/{list_name}/reminders/{title}/flag", response_model=schemas.SuccessEnvelope)
def set_flag(
    list_name: str,
    title: str,
    body: schemas.FlagUpdate,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    return crud.set_flag(gateway, list_name, title, body.flagged)


@app.put("/lists/{list_name}/reminders/{title}/remind-date", response_model=schemas.SuccessEnvelope)
def set_remind_date(
    list_name: str,
    title: str,
    body: schemas.RemindDateUpdate,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    return crud.set_remind_date(gateway, list_name, title, body.remind_date)


@app.get("/lists/{list_name}/reminders/{title}/recurrence")
def get_recurrence(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.get_recurrence(gateway, list_name, title)


@app.put("/lists/{list_name}/reminders/{title}/recurrence", response_model=schemas.SuccessEnvelope)
def set_recurrence(
    list_name: str,
    title: str,
    body: schemas.RecurrenceSet,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    return crud.set_recurrence(
        gateway, list_name, title, body.frequency,
        interval=body.interval, end_count=body.end_count, end_date=body.end_date,
    )


@app.delete("/lists/{list_name}/reminders/{title}/recurrence", response_model=schemas.SuccessEnvelope)
def clear_recurrence(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.clear_recurrence(gateway, list_name, title)


@app.get("/lists/{list_name}/reminders/{title}/location")
def get_location(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.get_location(gateway, list_name, title)


@app.put("/lists/{list_name}/reminders/{title}/location", response_model=schemas.SuccessEnvelope)
def set_location(
    list_name: str,
    title: str,
    body: schemas.LocationSet,
    gateway: StoreGateway = Depends(store_gateway.get_gateway)
):
    return crud.set_location(
        gateway, list_name, title, body.latitude, body.longitude,
        place=body.title, radius=body.radius, proximity=body.proximity,
    )


@app.delete("/lists/{list_name}/reminders/{title}/location", response_model=schemas.SuccessEnvelope)
def clear_location(list_name: str, title: str, gateway: StoreGateway = Depends(store_gateway.get_gateway)):
    return crud.clear_location(gateway, list_name, title)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level="info"
    )

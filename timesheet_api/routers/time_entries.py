"""Time entry endpoints - logging work hours."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from timesheet_api.database import get_database
from timesheet_api.errors import TimesheetError
from timesheet_api.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryStatus,
    TimeEntryUpdate,
)
from timesheet_api.models.user import Caller
from timesheet_api.routers.auth import get_current_caller
from timesheet_api.services.time_entry_service import TimeEntryService


router = APIRouter(prefix="/time-entries", tags=["time-entries"])


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_create: TimeEntryCreate,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Log a time entry.

    - Requires authentication
    - Entry starts as a draft
    """
    service = TimeEntryService(db)
    return await service.create_entry(caller=caller, entry_create=entry_create)


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: Optional[str] = Query(None),
    entry_status: Optional[TimeEntryStatus] = Query(None, alias="status"),
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    List time entries.

    - Requires authentication
    - Non-admins only see their own entries; admins may filter by user_id
    - Results sorted by date descending
    """
    service = TimeEntryService(db)
    return await service.list_entries(
        caller=caller,
        start_date=start_date,
        end_date=end_date,
        user_id=user_id,
        status=entry_status,
    )


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    service = TimeEntryService(db)
    try:
        return await service.get_entry(caller=caller, entry_id=entry_id)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Update a time entry.

    - User must own the entry
    - Only draft entries can be edited
    """
    service = TimeEntryService(db)
    try:
        return await service.update_entry(
            caller=caller,
            entry_id=entry_id,
            entry_update=entry_update,
        )
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Delete a time entry.

    - User must own the entry
    - Only draft entries can be deleted
    """
    service = TimeEntryService(db)
    try:
        return await service.delete_entry(caller=caller, entry_id=entry_id)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

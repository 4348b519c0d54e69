"""Time entry service - business logic for logging work hours."""
import logging
from datetime import date, datetime
from typing import Optional

from timesheet_api.errors import InvalidTransition, NotFoundError
from timesheet_api.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryStatus,
    TimeEntryUpdate,
)
from timesheet_api.models.user import Caller
from timesheet_api.utils.mongo import (
    as_date,
    day_end,
    day_start,
    entry_day,
    parse_object_id,
    to_decimal,
    to_decimal128,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "client_id", "category_id", "hours", "what_did_you_do")


def doc_to_entry(doc: dict) -> TimeEntry:
    """
    Convert database document to TimeEntry model.

    Handles datetime to date conversion and Decimal128 hours.
    """
    return TimeEntry(
        _id=str(doc["_id"]),
        user_id=doc["user_id"],
        date=as_date(doc["date"]),
        client_id=doc["client_id"],
        project_id=doc.get("project_id"),
        category_id=doc["category_id"],
        hours=to_decimal(doc["hours"]),
        what_did_you_do=doc["what_did_you_do"],
        what_got_completed=doc.get("what_got_completed"),
        status=doc["status"],
        invoice_id=doc.get("invoice_id"),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class TimeEntryService:
    """Service for handling time entry operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]

    async def create_entry(
        self,
        caller: Caller,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Log work for the caller. New entries always start as drafts.

        Args:
            caller: Requesting user
            entry_create: Time entry creation data

        Returns:
            Created time entry
        """
        now = datetime.utcnow()
        entry_doc = {
            "user_id": caller.user_id,
            "date": entry_day(entry_create.date),
            "client_id": entry_create.client_id,
            "project_id": entry_create.project_id,
            "category_id": entry_create.category_id,
            "hours": to_decimal128(entry_create.hours),
            "what_did_you_do": entry_create.what_did_you_do,
            "what_got_completed": entry_create.what_got_completed,
            "status": TimeEntryStatus.DRAFT.value,
            "invoice_id": None,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.time_entries.insert_one(entry_doc)
        entry_doc["_id"] = result.inserted_id

        return doc_to_entry(entry_doc)

    async def list_entries(
        self,
        caller: Caller,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[str] = None,
        status: Optional[TimeEntryStatus] = None,
    ) -> list[TimeEntry]:
        """
        List time entries with optional filtering.

        Non-admins only ever see their own entries; admins see everyone's
        unless ``user_id`` narrows the query.

        Args:
            caller: Requesting user
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            user_id: Optional owner filter (admins only)
            status: Optional status filter

        Returns:
            Entries sorted by date then creation time, newest first
        """
        query: dict = {}

        if not caller.is_admin:
            query["user_id"] = caller.user_id
        elif user_id:
            query["user_id"] = user_id

        if start_date or end_date:
            query["date"] = {}
            if start_date:
                query["date"]["$gte"] = day_start(start_date)
            if end_date:
                query["date"]["$lte"] = day_end(end_date)

        if status:
            query["status"] = TimeEntryStatus(status).value

        cursor = self.time_entries.find(query).sort([("date", -1), ("created_at", -1)])
        entry_docs = await cursor.to_list(length=None)

        return [doc_to_entry(doc) for doc in entry_docs]

    async def _get_owned_doc(self, caller: Caller, entry_id: str) -> dict:
        object_id = parse_object_id(entry_id, "Time entry")

        query = {"_id": object_id}
        if not caller.is_admin:
            query["user_id"] = caller.user_id

        existing = await self.time_entries.find_one(query)
        if not existing:
            raise NotFoundError("Time entry not found")

        return existing

    async def get_entry(self, caller: Caller, entry_id: str) -> TimeEntry:
        """
        Get a single time entry.

        Raises:
            NotFoundError: If the entry doesn't exist or isn't visible to the caller
        """
        return doc_to_entry(await self._get_owned_doc(caller, entry_id))

    async def update_entry(
        self,
        caller: Caller,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Edit a draft time entry.

        Args:
            caller: Requesting user (must own the entry)
            entry_id: Time entry ID
            entry_update: Fields to change

        Returns:
            Updated time entry

        Raises:
            NotFoundError: If entry not found for this user
            InvalidTransition: If the entry is bound to an invoice
        """
        owner_only = Caller(user_id=caller.user_id)
        existing = await self._get_owned_doc(owner_only, entry_id)

        if existing["status"] != TimeEntryStatus.DRAFT.value:
            raise InvalidTransition("Time entry is locked by an invoice")

        changes = entry_update.model_dump(exclude_unset=True)

        # Required fields can't be cleared
        for key in REQUIRED_FIELDS:
            if changes.get(key) is None:
                changes.pop(key, None)
        for key in ("project_id", "what_got_completed"):
            if key in changes:
                changes[key] = changes[key] or None
        if "date" in changes:
            changes["date"] = entry_day(changes["date"])
        if "hours" in changes:
            changes["hours"] = to_decimal128(changes["hours"])

        update_doc = {**changes, "updated_at": datetime.utcnow()}

        # Only drafts may change; a concurrent invoice claim wins
        updated_doc = await self.time_entries.find_one_and_update(
            {
                "_id": existing["_id"],
                "user_id": caller.user_id,
                "status": TimeEntryStatus.DRAFT.value,
            },
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise InvalidTransition("Time entry is locked by an invoice")

        return doc_to_entry(updated_doc)

    async def delete_entry(
        self,
        caller: Caller,
        entry_id: str,
    ) -> dict:
        """
        Delete a draft time entry.

        Args:
            caller: Requesting user (must own the entry)
            entry_id: Time entry ID

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFoundError: If entry not found for this user
            InvalidTransition: If the entry is bound to an invoice
        """
        owner_only = Caller(user_id=caller.user_id)
        existing = await self._get_owned_doc(owner_only, entry_id)

        if existing["status"] != TimeEntryStatus.DRAFT.value:
            raise InvalidTransition("Time entry is locked by an invoice")

        result = await self.time_entries.delete_one({
            "_id": existing["_id"],
            "user_id": caller.user_id,
            "status": TimeEntryStatus.DRAFT.value,
        })

        if result.deleted_count == 0:
            raise InvalidTransition("Time entry is locked by an invoice")

        logger.info("Deleted time entry %s for user %s", entry_id, caller.user_id)
        return {"deleted_count": result.deleted_count}

"""Invoice service - aggregation into invoices and the invoice lifecycle."""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from timesheet_api.config import settings
from timesheet_api.database import unit_of_work
from timesheet_api.errors import (
    InvalidTransition,
    NotFoundError,
    StorageError,
    Unauthorized,
    ValidationError,
)
from timesheet_api.models.invoice import Invoice, InvoiceStatus, LineItem
from timesheet_api.models.time_entry import TimeEntryStatus
from timesheet_api.models.user import Caller
from timesheet_api.services.aggregation import (
    aggregate_entries,
    price_line_items,
    summarize,
)
from timesheet_api.services.numbering import generate_invoice_number
from timesheet_api.services.time_entry_service import doc_to_entry
from timesheet_api.utils.mongo import (
    as_date,
    day_end,
    day_start,
    parse_object_id,
    to_decimal,
    to_decimal128,
)

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


def doc_to_invoice(doc: dict) -> Invoice:
    """Convert database document to Invoice model."""
    line_items = [
        LineItem(
            id=item["id"],
            client_id=item["client_id"],
            project_id=item.get("project_id"),
            category_id=item["category_id"],
            description=item["description"],
            hours=to_decimal(item["hours"]),
            rate=to_decimal(item["rate"]),
            amount=to_decimal(item["amount"]),
        )
        for item in doc.get("line_items", [])
    ]

    return Invoice(
        _id=str(doc["_id"]),
        user_id=doc["user_id"],
        invoice_number=doc["invoice_number"],
        period_start=as_date(doc["period_start"]),
        period_end=as_date(doc["period_end"]),
        status=doc["status"],
        total_hours=to_decimal(doc["total_hours"]),
        total_amount=to_decimal(doc["total_amount"]),
        line_items=line_items,
        submitted_at=doc.get("submitted_at"),
        approved_at=doc.get("approved_at"),
        approved_by_id=doc.get("approved_by_id"),
        rejected_at=doc.get("rejected_at"),
        rejected_by_id=doc.get("rejected_by_id"),
        rejection_reason=doc.get("rejection_reason"),
        paid_at=doc.get("paid_at"),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class InvoiceService:
    """
    Service for invoice operations.

    Lifecycle:
        draft -> submitted -> approved -> paid
                           -> rejected (time entries go back to draft)

    Time entries follow their invoice: creating an invoice binds its entries
    (draft -> submitted), submitting locks them (submitted -> locked) and
    rejecting releases them (-> draft, reference cleared).
    """

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.invoices = db["invoices"]
        self.time_entries = db["time_entries"]
        self.users = db["users"]

    async def get_hourly_rate(self, user_id: str) -> Decimal:
        """
        Hourly rate billed for a user.

        Falls back to ``settings.default_hourly_rate`` when the user has no
        profile or no rate on it.
        """
        user = await self.users.find_one({"_id": user_id})
        if user and user.get("default_hourly_rate") is not None:
            return to_decimal(user["default_hourly_rate"])
        return settings.default_hourly_rate

    async def _find_invoice_doc(self, invoice_id: str) -> dict:
        object_id = parse_object_id(invoice_id, "Invoice")
        doc = await self.invoices.find_one({"_id": object_id})
        if not doc:
            raise NotFoundError("Invoice not found")
        return doc

    async def _release_entries(self, invoice_id: str, session=None) -> None:
        """Return every entry bound to an invoice to draft."""
        await self.time_entries.update_many(
            {"invoice_id": invoice_id},
            {"$set": {
                "status": TimeEntryStatus.DRAFT.value,
                "invoice_id": None,
                "updated_at": datetime.utcnow(),
            }},
            session=session,
        )

    async def create_invoice(
        self,
        caller: Caller,
        period_start: date,
        period_end: date,
    ) -> Invoice:
        """
        Aggregate the caller's draft entries for a period into a draft invoice.

        The selected entries are claimed (draft -> submitted, bound to the new
        invoice) together with the invoice insert. The claim only matches
        entries that are still drafts, so a concurrent create for the same
        period can't bill an entry twice.

        Args:
            caller: Requesting user; invoices are always for the caller
            period_start: First day of the period (inclusive)
            period_end: Last day of the period (inclusive)

        Returns:
            Created invoice in draft status

        Raises:
            ValidationError: If the period is missing or inverted
            NoEntriesFound: If there are no draft entries in the period
            InvalidTransition: If entries were claimed concurrently
            StorageError: If the invoice couldn't be written
        """
        if period_start is None or period_end is None:
            raise ValidationError("Period start and end required")
        if period_start > period_end:
            raise ValidationError("Period start must be on or before period end")

        rate = await self.get_hourly_rate(caller.user_id)

        cursor = self.time_entries.find({
            "user_id": caller.user_id,
            "status": TimeEntryStatus.DRAFT.value,
            "date": {"$gte": day_start(period_start), "$lte": day_end(period_end)},
        }).sort([("date", 1), ("created_at", 1)])
        entry_docs = await cursor.to_list(length=None)

        specs = aggregate_entries(doc_to_entry(doc) for doc in entry_docs)
        items = price_line_items(specs, rate)
        total_hours, total_amount = summarize(items)

        invoice_id = ObjectId()
        now = datetime.utcnow()
        invoice_doc = {
            "_id": invoice_id,
            "user_id": caller.user_id,
            "invoice_number": generate_invoice_number(caller.user_id, period_start),
            "period_start": day_start(period_start),
            "period_end": day_end(period_end),
            "status": InvoiceStatus.DRAFT.value,
            "total_hours": to_decimal128(total_hours),
            "total_amount": to_decimal128(total_amount),
            "line_items": [
                {
                    "id": str(ObjectId()),
                    "client_id": item.client_id,
                    "project_id": item.project_id,
                    "category_id": item.category_id,
                    "description": item.description,
                    "hours": to_decimal128(item.hours),
                    "rate": to_decimal128(item.rate),
                    "amount": to_decimal128(item.amount),
                }
                for item in items
            ],
            "submitted_at": None,
            "approved_at": None,
            "approved_by_id": None,
            "rejected_at": None,
            "rejected_by_id": None,
            "rejection_reason": None,
            "paid_at": None,
            "created_at": now,
            "updated_at": now,
        }
        entry_ids = [doc["_id"] for doc in entry_docs]

        async with unit_of_work(self.db) as session:
            claimed = await self.time_entries.update_many(
                {
                    "_id": {"$in": entry_ids},
                    "user_id": caller.user_id,
                    "status": TimeEntryStatus.DRAFT.value,
                },
                {"$set": {
                    "status": TimeEntryStatus.SUBMITTED.value,
                    "invoice_id": str(invoice_id),
                    "updated_at": now,
                }},
                session=session,
            )

            if claimed.modified_count != len(entry_ids):
                logger.warning(
                    "Claimed %d of %d entries for user %s; aborting invoice",
                    claimed.modified_count, len(entry_ids), caller.user_id,
                )
                if session is None:
                    await self._release_entries(str(invoice_id))
                raise InvalidTransition(
                    "Time entries changed while the invoice was being created"
                )

            try:
                await self.invoices.insert_one(invoice_doc, session=session)
            except PyMongoError as e:
                logger.exception("Failed to insert invoice for user %s", caller.user_id)
                if session is None:
                    await self._release_entries(str(invoice_id))
                raise StorageError("Failed to create invoice") from e

        logger.info(
            "Created invoice %s (%s) for user %s: %d line items, %s hours",
            invoice_doc["invoice_number"], invoice_id, caller.user_id,
            len(items), total_hours,
        )
        return doc_to_invoice(invoice_doc)

    async def _revert_transition(self, doc: dict, changes: dict) -> None:
        """Restore the fields a transition changed, if nothing moved it since."""
        restored = {field: doc.get(field) for field in changes}
        restored["updated_at"] = doc["updated_at"]
        await self.invoices.find_one_and_update(
            {"_id": doc["_id"], "status": changes["status"]},
            {"$set": restored},
        )

    async def _transition(
        self,
        doc: dict,
        expected: InvoiceStatus,
        changes: dict,
        now: datetime,
        entry_filter: Optional[dict] = None,
        entry_changes: Optional[dict] = None,
    ) -> Invoice:
        """
        Move an invoice out of ``expected`` and update its time entries in
        the same unit of work.

        The invoice update is conditional on the current status, so a guard
        checked against a stale read can't apply a second transition. If the
        entry update fails outside a transaction, the invoice is put back to
        the fields it had before and ``StorageError`` is raised.
        """
        async with unit_of_work(self.db) as session:
            updated = await self.invoices.find_one_and_update(
                {"_id": doc["_id"], "status": expected.value},
                {"$set": {**changes, "updated_at": now}},
                return_document=True,
                session=session,
            )

            if updated is None:
                raise InvalidTransition(f"Invoice not in {expected.value} state")

            if entry_changes:
                try:
                    await self.time_entries.update_many(
                        {"invoice_id": str(doc["_id"]), **(entry_filter or {})},
                        {"$set": {**entry_changes, "updated_at": now}},
                        session=session,
                    )
                except PyMongoError as e:
                    logger.exception(
                        "Failed to update time entries for invoice %s", doc["_id"]
                    )
                    if session is None:
                        await self._revert_transition(doc, changes)
                    raise StorageError("Failed to update invoice time entries") from e

        logger.info(
            "Invoice %s (%s): %s -> %s",
            updated["invoice_number"], updated["_id"], expected.value, updated["status"],
        )
        return doc_to_invoice(updated)

    async def submit_invoice(self, invoice_id: str, caller: Caller) -> Invoice:
        """
        Submit a draft invoice for admin review and lock its entries.

        Raises:
            NotFoundError: If invoice doesn't exist
            Unauthorized: If caller doesn't own the invoice
            InvalidTransition: If invoice isn't a draft
            StorageError: If its time entries couldn't be locked
        """
        doc = await self._find_invoice_doc(invoice_id)

        if doc["user_id"] != caller.user_id:
            raise Unauthorized("Only the invoice owner can submit it")
        if doc["status"] != InvoiceStatus.DRAFT.value:
            raise InvalidTransition("Invoice already submitted")

        now = datetime.utcnow()
        return await self._transition(
            doc,
            InvoiceStatus.DRAFT,
            {"status": InvoiceStatus.SUBMITTED.value, "submitted_at": now},
            now,
            entry_filter={"status": TimeEntryStatus.SUBMITTED.value},
            entry_changes={"status": TimeEntryStatus.LOCKED.value},
        )

    async def approve_invoice(self, invoice_id: str, caller: Caller) -> Invoice:
        """
        Approve a submitted invoice. Time entries stay locked.

        Raises:
            Unauthorized: If caller isn't an admin
            NotFoundError: If invoice doesn't exist
            InvalidTransition: If invoice isn't submitted
        """
        if not caller.is_admin:
            raise Unauthorized("Admin role required")

        doc = await self._find_invoice_doc(invoice_id)
        if doc["status"] != InvoiceStatus.SUBMITTED.value:
            raise InvalidTransition("Invoice not in submitted state")

        now = datetime.utcnow()
        return await self._transition(
            doc,
            InvoiceStatus.SUBMITTED,
            {
                "status": InvoiceStatus.APPROVED.value,
                "approved_at": now,
                "approved_by_id": caller.user_id,
            },
            now,
        )

    async def reject_invoice(
        self,
        invoice_id: str,
        caller: Caller,
        reason: Optional[str] = None,
    ) -> Invoice:
        """
        Reject a submitted invoice and release its entries back to draft.

        Released entries lose their invoice reference so they can be
        aggregated into a fresh invoice. A blank reason is stored as
        ``DEFAULT_REJECTION_REASON``.

        Raises:
            Unauthorized: If caller isn't an admin
            NotFoundError: If invoice doesn't exist
            InvalidTransition: If invoice isn't submitted
            StorageError: If its time entries couldn't be released
        """
        if not caller.is_admin:
            raise Unauthorized("Admin role required")

        doc = await self._find_invoice_doc(invoice_id)
        if doc["status"] != InvoiceStatus.SUBMITTED.value:
            raise InvalidTransition("Invoice not in submitted state")

        reason = (reason or "").strip() or DEFAULT_REJECTION_REASON

        now = datetime.utcnow()
        return await self._transition(
            doc,
            InvoiceStatus.SUBMITTED,
            {
                "status": InvoiceStatus.REJECTED.value,
                "rejection_reason": reason,
                "rejected_at": now,
                "rejected_by_id": caller.user_id,
            },
            now,
            entry_changes={"status": TimeEntryStatus.DRAFT.value, "invoice_id": None},
        )

    async def mark_paid(self, invoice_id: str, caller: Caller) -> Invoice:
        """
        Record payment of an approved invoice.

        Raises:
            Unauthorized: If caller isn't an admin
            NotFoundError: If invoice doesn't exist
            InvalidTransition: If invoice isn't approved
        """
        if not caller.is_admin:
            raise Unauthorized("Admin role required")

        doc = await self._find_invoice_doc(invoice_id)
        if doc["status"] != InvoiceStatus.APPROVED.value:
            raise InvalidTransition("Invoice not in approved state")

        now = datetime.utcnow()
        return await self._transition(
            doc,
            InvoiceStatus.APPROVED,
            {"status": InvoiceStatus.PAID.value, "paid_at": now},
            now,
        )

    async def get_invoice(self, invoice_id: str, caller: Caller) -> Invoice:
        """
        Get an invoice. Non-admins can only view their own.

        Raises:
            NotFoundError: If invoice doesn't exist
            Unauthorized: If caller may not view it
        """
        doc = await self._find_invoice_doc(invoice_id)

        if not caller.is_admin and doc["user_id"] != caller.user_id:
            raise Unauthorized("Not allowed to view this invoice")

        return doc_to_invoice(doc)

    async def list_invoices(
        self,
        caller: Caller,
        status: Optional[InvoiceStatus] = None,
    ) -> list[Invoice]:
        """
        List invoices, newest first.

        Admins see every user's invoices; everyone else only their own.
        """
        query: dict = {}

        if not caller.is_admin:
            query["user_id"] = caller.user_id

        if status:
            query["status"] = InvoiceStatus(status).value

        cursor = self.invoices.find(query).sort("created_at", -1)
        invoice_docs = await cursor.to_list(length=None)

        return [doc_to_invoice(doc) for doc in invoice_docs]

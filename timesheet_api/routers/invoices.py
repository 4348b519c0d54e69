"""Invoice endpoints - creation and review lifecycle."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from timesheet_api.database import get_database
from timesheet_api.errors import TimesheetError
from timesheet_api.models.invoice import Invoice, InvoiceCreate, InvoiceReject, InvoiceStatus
from timesheet_api.models.user import Caller
from timesheet_api.routers.auth import get_current_caller
from timesheet_api.services.invoice_service import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_create: InvoiceCreate,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Create a draft invoice from the caller's draft entries in a period.

    - Entries are grouped by client, project and category
    - Grouped entries are bound to the invoice and can't be edited
    - 400 if there are no draft entries in the period
    """
    service = InvoiceService(db)
    try:
        return await service.create_invoice(
            caller=caller,
            period_start=invoice_create.period_start,
            period_end=invoice_create.period_end,
        )
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=list[Invoice])
async def list_invoices(
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status"),
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    List invoices, newest first.

    - Admins see all invoices, everyone else their own
    - Optional status filter
    """
    service = InvoiceService(db)
    return await service.list_invoices(caller=caller, status=invoice_status)


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """Get an invoice with its line items."""
    service = InvoiceService(db)
    try:
        return await service.get_invoice(invoice_id=invoice_id, caller=caller)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{invoice_id}/submit", response_model=Invoice)
async def submit_invoice(
    invoice_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Submit a draft invoice for review.

    - Only the owner can submit
    - Time entries on the invoice become locked
    """
    service = InvoiceService(db)
    try:
        return await service.submit_invoice(invoice_id=invoice_id, caller=caller)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{invoice_id}/approve", response_model=Invoice)
async def approve_invoice(
    invoice_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """Approve a submitted invoice (admin only)."""
    service = InvoiceService(db)
    try:
        return await service.approve_invoice(invoice_id=invoice_id, caller=caller)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{invoice_id}/reject", response_model=Invoice)
async def reject_invoice(
    invoice_id: str,
    rejection: Optional[InvoiceReject] = None,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """
    Reject a submitted invoice (admin only).

    - Time entries go back to draft so the user can fix and re-invoice them
    """
    service = InvoiceService(db)
    reason = rejection.reason if rejection else None
    try:
        return await service.reject_invoice(
            invoice_id=invoice_id,
            caller=caller,
            reason=reason,
        )
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{invoice_id}/pay", response_model=Invoice)
async def mark_invoice_paid(
    invoice_id: str,
    caller: Caller = Depends(get_current_caller),
    db=Depends(get_database),
):
    """Mark an approved invoice as paid (admin only)."""
    service = InvoiceService(db)
    try:
        return await service.mark_paid(invoice_id=invoice_id, caller=caller)
    except TimesheetError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

"""
services/admin/router.py
Admin-only endpoints: teacher approval, booking status progression,
payment verification, manual hour top-ups, and the revenue audit.

Every mutation is persisted before returning.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from config.portal import Portal, get_portal
from shared.middleware.auth import require_admin
from shared.models.models import BookingStatus
from shared.schemas.schemas import (
    BookingResponse,
    BookingStatusRequest,
    FinanceSummaryResponse,
    TeacherResponse,
    TopUpRequest,
    TransactionResponse,
)
from shared.session.identity import AdminIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ── Teachers ───────────────────────────────────────────────────────────────────

@router.get("/teachers", response_model=list[TeacherResponse])
async def list_teachers(
    approved: bool = Query(None),
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """All teachers, optionally filtered by approval state."""
    teachers = portal.ledger.teachers
    if approved is not None:
        teachers = [t for t in teachers if t.is_approved == approved]
    return [TeacherResponse.model_validate(t) for t in teachers]


@router.post("/teachers/{teacher_id}/approve", response_model=TeacherResponse)
async def approve_teacher(
    teacher_id: str,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Approve a registered teacher so they can log in. Safe to repeat."""
    teacher = portal.ledger.approve_teacher(teacher_id)
    await portal.persist()
    return TeacherResponse.model_validate(teacher)


@router.post("/teachers/{teacher_id}/top-up", response_model=TransactionResponse)
async def manual_top_up(
    teacher_id: str,
    data: TopUpRequest,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """
    Add hours directly, e.g. for cash paid at the desk.
    Records an already-verified Manual Top-up transaction.
    """
    tx = portal.ledger.manual_top_up(teacher_id, data.amount, data.hours)
    await portal.persist()
    logger.info(f"{admin.email} topped up {teacher_id} by {data.hours}h ({data.amount})")
    return TransactionResponse.model_validate(tx)


# ── Bookings ───────────────────────────────────────────────────────────────────

@router.get("/bookings", response_model=list[BookingResponse])
async def list_bookings(
    status_filter: str = Query(None, alias="status"),
    day: str = Query(None, alias="date"),
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Every booking, newest first, optionally filtered by status and date."""
    bookings = portal.ledger.bookings
    if status_filter:
        try:
            wanted = BookingStatus(status_filter)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status_filter}")
        bookings = [b for b in bookings if b.status == wanted]
    if day:
        bookings = [b for b in bookings if b.date == day]
    return [BookingResponse.model_validate(b) for b in bookings]


@router.post("/bookings/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    data: BookingStatusRequest,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """
    Move a booking along Pending → Confirmed → Packed/Ready → Completed,
    or cancel it from any non-terminal state (hours go back to the teacher).
    """
    booking = portal.ledger.update_booking_status(booking_id, BookingStatus(data.status))
    await portal.persist()
    return BookingResponse.model_validate(booking)


# ── Payments ───────────────────────────────────────────────────────────────────

@router.get("/transactions/pending", response_model=list[TransactionResponse])
async def pending_transactions(
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Verification queue: unverified purchases, newest first."""
    return [TransactionResponse.model_validate(tx) for tx in portal.ledger.pending_transactions()]


@router.post("/transactions/{transaction_id}/verify", response_model=TransactionResponse)
async def verify_transaction(
    transaction_id: str,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Confirm the payment arrived. Credits the package hours exactly once."""
    tx = portal.ledger.verify_transaction(transaction_id)
    await portal.persist()
    return TransactionResponse.model_validate(tx)


# ── Finance ────────────────────────────────────────────────────────────────────

@router.get("/finance", response_model=FinanceSummaryResponse)
async def finance_summary(
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    ledger = portal.ledger
    verified = ledger.verified_transactions()
    return FinanceSummaryResponse(
        total_revenue=ledger.revenue_total(),
        verified_count=len(verified),
        pending_count=len(ledger.pending_transactions()),
        transactions=[TransactionResponse.model_validate(tx) for tx in verified],
    )


@router.get("/finance/export")
async def export_finance(
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Verified transactions as a CSV download."""
    filename = f"Dream_Audit_{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=portal.ledger.revenue_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

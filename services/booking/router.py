"""
services/booking/router.py
Studio slot booking for teachers.
States: Pending → Confirmed → Packed/Ready → Completed
        {Pending, Confirmed, Packed/Ready} → Cancelled (hours refunded)
Status changes are admin actions, see services/admin/router.py.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from config.portal import Portal, get_portal
from shared.middleware.auth import require_teacher
from shared.schemas.schemas import (
    BookingCreatedResponse,
    BookingCreateRequest,
    BookingResponse,
    DayAvailabilityResponse,
    SlotResponse,
)
from shared.session.identity import TeacherIdentity
from shared.utils.messaging import booking_message_link

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/availability", response_model=DayAvailabilityResponse)
async def get_day_availability(
    day: date = Query(..., alias="date"),
    portal: Portal = Depends(get_portal),
):
    """Hour-by-hour availability for one studio day."""
    iso_day = day.isoformat()
    return DayAvailabilityResponse(
        date=iso_day,
        slots=[
            SlotResponse(hour=hour, available=available)
            for hour, available in portal.ledger.day_availability(iso_day)
        ],
    )


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreateRequest,
    identity: TeacherIdentity = Depends(require_teacher),
    portal: Portal = Depends(get_portal),
):
    """
    Reserve a slot. Steps:
    1. Check the teacher has enough hours and the range is free
    2. Create a Pending booking priced from the CMS duration tiers
    3. Debit the hours and persist
    4. Return the booking with a prefilled message link for the studio
    """
    ledger = portal.ledger
    booking = ledger.create_booking(
        identity.id, data.date.isoformat(), data.start_hour, data.duration
    )
    await portal.persist()

    teacher = ledger.get_teacher(identity.id)
    return BookingCreatedResponse(
        **BookingResponse.model_validate(booking).model_dump(),
        credits_remaining=teacher.credits,
        message_link=booking_message_link(booking, ledger.cms.contact_number),
    )


@router.get("", response_model=list[BookingResponse])
async def list_my_bookings(
    identity: TeacherIdentity = Depends(require_teacher),
    portal: Portal = Depends(get_portal),
):
    """The teacher's own bookings, newest first."""
    return [
        BookingResponse.model_validate(b)
        for b in portal.ledger.teacher_bookings(identity.id)
    ]

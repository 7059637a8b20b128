"""
shared/utils/messaging.py
Prefilled WhatsApp link sent to the studio when a teacher books a slot.
"""

import re
from urllib.parse import quote

from config.settings import settings
from shared.models.models import Booking


def booking_request_text(booking: Booking) -> str:
    return (
        "*Studio Booking Request*\n\n"
        f"Teacher: {booking.teacher_name}\n"
        f"Date: {booking.date}\n"
        f"Time: {booking.start_time}:00\n"
        f"Duration: {booking.duration} Hours\n\n"
        "Status: Pending confirmation."
    )


def booking_message_link(booking: Booking, contact_number: str) -> str:
    """
    Build the message-intent URL for the studio contact number.
    Only the last nine digits are kept; the country code comes from settings.
    """
    digits = re.sub(r"[^0-9]", "", contact_number or "")
    local = digits[-9:]
    text = quote(booking_request_text(booking), safe="")
    return f"{settings.MESSAGING_BASE_URL}/{settings.MESSAGING_COUNTRY_CODE}{local}?text={text}"

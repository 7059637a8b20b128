"""
shared/ledger/ledger.py
In-memory ledger for the studio: teachers, bookings, packages, transactions
and the CMS record.

All credit movements happen here. Each operation validates everything it
needs before touching any record, so a rejected call leaves the ledger
unchanged.

Slots that have already started (earlier days, or today up to the current
hour on the studio clock) cannot be booked.

Booking states: Pending → Confirmed → Packed/Ready → Completed
                {Pending, Confirmed, Packed/Ready} → Cancelled (refunds hours)
"""

import csv
import io
import logging
from datetime import date as date_type
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from config.settings import settings
from shared.ledger.errors import (
    DuplicateEmail,
    IllegalTransition,
    InsufficientCredits,
    InvalidAmount,
    InvalidCredentials,
    InvalidSlot,
    NotFound,
    PendingApproval,
    SlotUnavailable,
)
from shared.models.models import (
    Booking,
    BookingStatus,
    CMSConfig,
    PaymentMethod,
    StudioPackage,
    Teacher,
    Transaction,
    TransactionType,
    initial_packages,
    new_id,
)
from shared.session.identity import AdminIdentity, Identity, TeacherIdentity
from shared.utils.security import constant_time_equals, hash_password, verify_password

logger = logging.getLogger(__name__)


BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.PACKED, BookingStatus.CANCELLED}),
    BookingStatus.PACKED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def studio_now() -> datetime:
    """Current wall-clock time at the studio."""
    offset = timezone(timedelta(minutes=settings.STUDIO_UTC_OFFSET_MINUTES))
    return datetime.now(offset)


class Ledger:
    def __init__(
        self,
        teachers: Optional[List[Teacher]] = None,
        bookings: Optional[List[Booking]] = None,
        packages: Optional[List[StudioPackage]] = None,
        transactions: Optional[List[Transaction]] = None,
        cms: Optional[CMSConfig] = None,
        admin_email: str = settings.ADMIN_EMAIL,
        admin_password: str = settings.ADMIN_PASSWORD,
        clock: Callable[[], datetime] = studio_now,
    ):
        self.teachers: List[Teacher] = list(teachers or [])
        self.bookings: List[Booking] = list(bookings or [])
        self.packages: List[StudioPackage] = list(
            packages if packages is not None else initial_packages()
        )
        self.transactions: List[Transaction] = list(transactions or [])
        self.cms: CMSConfig = cms or CMSConfig()
        self.admin_email = admin_email
        self.admin_password = admin_password
        self.clock = clock

    # ── Lookups ───────────────────────────────────────────────

    def get_teacher(self, teacher_id: str) -> Teacher:
        for t in self.teachers:
            if t.id == teacher_id:
                return t
        raise NotFound("Teacher not found")

    def find_teacher_by_email(self, email: str) -> Optional[Teacher]:
        # Exact, case-sensitive match
        return next((t for t in self.teachers if t.email == email), None)

    def get_booking(self, booking_id: str) -> Booking:
        for b in self.bookings:
            if b.id == booking_id:
                return b
        raise NotFound("Booking not found")

    def get_package(self, package_id: str) -> StudioPackage:
        for p in self.packages:
            if p.id == package_id:
                return p
        raise NotFound("Package not found")

    def get_transaction(self, transaction_id: str) -> Transaction:
        for tx in self.transactions:
            if tx.id == transaction_id:
                return tx
        raise NotFound("Transaction not found")

    # ── Teachers & auth ───────────────────────────────────────

    def register_teacher(self, name: str, email: str, password: str) -> Teacher:
        if email == self.admin_email or self.find_teacher_by_email(email):
            raise DuplicateEmail()
        teacher = Teacher(name=name, email=email, password_hash=hash_password(password))
        self.teachers.append(teacher)
        logger.info(f"Teacher registered: {teacher.id} <{email}>")
        return teacher

    def authenticate(self, email: str, password: str) -> Identity:
        """
        The configured admin credential wins outright. Otherwise the email
        must belong to an approved teacher whose password matches.
        """
        if email == self.admin_email and constant_time_equals(password, self.admin_password):
            return AdminIdentity(email=email, name=self.cms.director_name)

        teacher = self.find_teacher_by_email(email)
        if not teacher or not verify_password(password, teacher.password_hash):
            raise InvalidCredentials()
        if not teacher.is_approved:
            raise PendingApproval()
        return TeacherIdentity(id=teacher.id, email=teacher.email, name=teacher.name)

    def approve_teacher(self, teacher_id: str) -> Teacher:
        teacher = self.get_teacher(teacher_id)
        if not teacher.is_approved:
            teacher.is_approved = True
            logger.info(f"Teacher approved: {teacher_id}")
        return teacher

    def _credit(self, teacher: Teacher, hours: float, reason: str) -> None:
        teacher.credits = teacher.credits + hours
        logger.info(f"Credited {hours}h to {teacher.id} ({reason}); balance {teacher.credits}h")

    # ── Slots & bookings ──────────────────────────────────────

    def is_slot_available(self, date: str, hour: int) -> bool:
        return not any(
            b.date == date and b.status != BookingStatus.CANCELLED and b.covers(hour)
            for b in self.bookings
        )

    def is_past(self, date: str, hour: int) -> bool:
        """True for hours that have already started: any earlier day, or today up to the current hour."""
        now = self.clock()
        day = _parse_day(date)
        today = now.date()
        return day < today or (day == today and hour <= now.hour)

    def is_range_available(self, date: str, start_hour: int, duration: int) -> bool:
        return all(self.is_slot_available(date, h) for h in range(start_hour, start_hour + duration))

    def day_availability(self, date: str) -> List[Tuple[int, bool]]:
        return [
            (hour, not self.is_past(date, hour) and self.is_slot_available(date, hour))
            for hour in range(settings.STUDIO_OPEN_HOUR, settings.STUDIO_CLOSE_HOUR)
        ]

    def create_booking(self, teacher_id: str, date: str, start_hour: int, duration: int) -> Booking:
        teacher = self.get_teacher(teacher_id)

        if duration < 1 or duration > settings.MAX_BOOKING_HOURS:
            raise InvalidSlot(f"Duration must be between 1 and {settings.MAX_BOOKING_HOURS} hours")
        if start_hour < settings.STUDIO_OPEN_HOUR or start_hour + duration > settings.STUDIO_CLOSE_HOUR:
            raise InvalidSlot()
        if self.is_past(date, start_hour):
            raise InvalidSlot("Cannot book a slot that has already started")
        if teacher.credits < duration:
            raise InsufficientCredits()
        if not self.is_range_available(date, start_hour, duration):
            raise SlotUnavailable()

        booking = Booking(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            date=date,
            start_time=start_hour,
            duration=duration,
            cost=self.cms.pricing.cost_for(duration),
        )
        self.bookings.insert(0, booking)
        teacher.credits = teacher.credits - duration
        logger.info(
            f"Booking {booking.id} created for {teacher.id} on {date} "
            f"{start_hour}:00 ({duration}h); balance {teacher.credits}h"
        )
        return booking

    def update_booking_status(self, booking_id: str, new_status: BookingStatus) -> Booking:
        booking = self.get_booking(booking_id)
        new_status = BookingStatus(new_status)

        if booking.status == new_status:
            return booking
        if new_status not in BOOKING_TRANSITIONS[booking.status]:
            raise IllegalTransition(
                f"Cannot move booking from '{booking.status.value}' to '{new_status.value}'"
            )

        prev_status = booking.status
        booking.status = new_status
        logger.info(f"Booking {booking_id}: {prev_status.value} → {new_status.value}")

        if new_status == BookingStatus.CANCELLED:
            try:
                teacher = self.get_teacher(booking.teacher_id)
            except NotFound:
                logger.warning(f"Booking {booking_id} cancelled but teacher {booking.teacher_id} is gone")
            else:
                self._credit(teacher, booking.duration, f"refund {booking_id}")
        return booking

    def teacher_bookings(self, teacher_id: str) -> List[Booking]:
        return [b for b in self.bookings if b.teacher_id == teacher_id]

    # ── Payments ──────────────────────────────────────────────

    def purchase_package(
        self,
        teacher_id: str,
        package_id: str,
        method: PaymentMethod,
        slip_image: Optional[str] = None,
    ) -> Transaction:
        teacher = self.get_teacher(teacher_id)
        package = self.get_package(package_id)
        tx = Transaction(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            package_id=package.id,
            package_name=package.name,
            package_hours=package.hours,
            amount=package.price,
            method=method,
            slip_image=slip_image,
            verified=False,
            type=TransactionType.PACKAGE,
        )
        self.transactions.insert(0, tx)
        logger.info(f"Purchase {tx.id}: {teacher.id} requested '{package.name}' via {method.value}")
        return tx

    def verify_transaction(self, transaction_id: str) -> Transaction:
        tx = self.get_transaction(transaction_id)
        if tx.verified:
            return tx

        hours = tx.package_hours
        if hours is None and tx.package_id:
            try:
                hours = self.get_package(tx.package_id).hours
            except NotFound:
                hours = None

        tx.verified = True
        logger.info(f"Transaction {transaction_id} verified")
        if hours:
            try:
                teacher = self.get_teacher(tx.teacher_id)
            except NotFound:
                logger.warning(f"Transaction {transaction_id} verified but teacher {tx.teacher_id} is gone")
            else:
                self._credit(teacher, hours, f"payment {transaction_id}")
        return tx

    def manual_top_up(self, teacher_id: str, amount: float, hours: float) -> Transaction:
        teacher = self.get_teacher(teacher_id)
        if hours <= 0 or amount < 0:
            raise InvalidAmount()
        tx = Transaction(
            id=new_id("mtx"),
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            amount=amount,
            method=PaymentMethod.MANUAL,
            verified=True,
            type=TransactionType.MANUAL_TOP_UP,
        )
        self.transactions.insert(0, tx)
        self._credit(teacher, hours, f"manual top-up {tx.id}")
        return tx

    def teacher_transactions(self, teacher_id: str) -> List[Transaction]:
        return [tx for tx in self.transactions if tx.teacher_id == teacher_id]

    def pending_transactions(self) -> List[Transaction]:
        return [tx for tx in self.transactions if not tx.verified]

    def verified_transactions(self) -> List[Transaction]:
        return [tx for tx in self.transactions if tx.verified]

    def revenue_total(self) -> float:
        return sum(tx.amount for tx in self.verified_transactions())

    def revenue_csv(self) -> str:
        """Audit export of verified transactions."""
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["Date", "Teacher", "Plan", "Yield (LKR)"])
        for tx in self.verified_transactions():
            writer.writerow([
                tx.date.date().isoformat(),
                tx.teacher_name,
                tx.package_name or tx.type.value,
                f"{tx.amount:g}",
            ])
        return buf.getvalue()

    # ── Catalog & CMS ─────────────────────────────────────────

    def upsert_package(self, package: StudioPackage) -> StudioPackage:
        for i, existing in enumerate(self.packages):
            if existing.id == package.id:
                self.packages[i] = package
                logger.info(f"Package updated: {package.id}")
                return package
        self.packages.append(package)
        logger.info(f"Package created: {package.id}")
        return package

    def delete_package(self, package_id: str) -> None:
        package = self.get_package(package_id)
        self.packages.remove(package)
        logger.info(f"Package deleted: {package_id}")

    def update_cms(self, config: CMSConfig) -> CMSConfig:
        self.cms = config
        logger.info("CMS config replaced")
        return config


def _parse_day(value: str) -> date_type:
    try:
        return date_type.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidSlot(f"Invalid date: {value}")

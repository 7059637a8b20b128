"""
shared/ledger/repository.py
Loads the ledger from the snapshot store once at startup and writes every
collection back after each mutation.
"""

import logging
from typing import Any, Callable, List, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from config.settings import settings
from config.store import BlobStore, Bucket
from shared.ledger.ledger import Ledger
from shared.models.models import (
    Booking,
    CMSConfig,
    StudioPackage,
    Teacher,
    Theme,
    Transaction,
    initial_packages,
)
from shared.utils.security import hash_password

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEMO_TEACHER_EMAIL = "teacher@dreamedu.com"
DEMO_TEACHER_PASSWORD = "teacher123"


class LedgerRepository:
    def __init__(self, store: BlobStore):
        self.store = store
        # Buckets that were missing or unreadable on the last load
        self.defaulted: set[str] = set()

    # ── Load ──────────────────────────────────────────────────

    async def _load_list(self, bucket: Bucket, model: Type[M], default: Callable[[], List[M]]) -> List[M]:
        result = await self.store.load(bucket.value, None)
        if result.was_defaulted:
            self.defaulted.add(bucket.value)
            return default()
        try:
            return TypeAdapter(List[model]).validate_python(result.value)
        except ValidationError as e:
            logger.warning(f"Bucket '{bucket.value}' failed validation, using default: {e.error_count()} errors")
            self.defaulted.add(bucket.value)
            return default()

    async def _load_cms(self) -> CMSConfig:
        result = await self.store.load(Bucket.CMS.value, None)
        if result.was_defaulted:
            self.defaulted.add(Bucket.CMS.value)
            return CMSConfig()
        try:
            return CMSConfig.model_validate(result.value)
        except ValidationError:
            logger.warning("CMS bucket failed validation, using default")
            self.defaulted.add(Bucket.CMS.value)
            return CMSConfig()

    async def load(self) -> Ledger:
        self.defaulted = set()
        teachers = await self._load_list(Bucket.TEACHERS, Teacher, list)
        if not teachers and settings.SEED_DEMO_TEACHER:
            teachers = [_demo_teacher()]
            logger.info("Seeded demo teacher")

        ledger = Ledger(
            teachers=teachers,
            bookings=await self._load_list(Bucket.BOOKINGS, Booking, list),
            packages=await self._load_list(Bucket.PACKAGES, StudioPackage, initial_packages),
            transactions=await self._load_list(Bucket.TRANSACTIONS, Transaction, list),
            cms=await self._load_cms(),
        )
        logger.info(
            f"Ledger loaded: {len(ledger.teachers)} teachers, {len(ledger.bookings)} bookings, "
            f"{len(ledger.transactions)} transactions"
        )
        return ledger

    # ── Persist ───────────────────────────────────────────────

    async def save(self, ledger: Ledger) -> None:
        """Full-snapshot overwrite of every collection bucket."""
        await self.store.save(Bucket.TEACHERS.value, _dump(ledger.teachers))
        await self.store.save(Bucket.BOOKINGS.value, _dump(ledger.bookings))
        await self.store.save(Bucket.PACKAGES.value, _dump(ledger.packages))
        await self.store.save(Bucket.TRANSACTIONS.value, _dump(ledger.transactions))
        await self.store.save(Bucket.CMS.value, ledger.cms.model_dump(mode="json"))

    # ── Theme preference ──────────────────────────────────────

    async def load_theme(self) -> Theme:
        result = await self.store.load(Bucket.THEME.value, Theme.DARK.value)
        try:
            return Theme(result.value)
        except ValueError:
            return Theme.DARK

    async def save_theme(self, theme: Theme) -> None:
        await self.store.save(Bucket.THEME.value, Theme(theme).value)


def _dump(records: List[BaseModel]) -> List[Any]:
    return [r.model_dump(mode="json") for r in records]


def _demo_teacher() -> Teacher:
    return Teacher(
        id="t-demo",
        name="Professional Teacher",
        email=DEMO_TEACHER_EMAIL,
        password_hash=hash_password(DEMO_TEACHER_PASSWORD),
        credits=5,
        is_approved=True,
    )

"""
config/portal.py
The one top-level context of the app: the ledger, its snapshot repository
and the session gate. Built on startup, handed to routes as a dependency.
"""

import logging
from typing import Optional

from config.settings import settings
from config.store import BlobStore, MemoryBlobStore, build_store
from shared.ledger.ledger import Ledger
from shared.ledger.repository import LedgerRepository
from shared.session.gate import SessionGate

logger = logging.getLogger(__name__)


class Portal:
    def __init__(self, ledger: Ledger, repository: LedgerRepository, gate: SessionGate):
        self.ledger = ledger
        self.repository = repository
        self.gate = gate

    @classmethod
    async def open(cls, store: BlobStore, ephemeral: Optional[BlobStore] = None) -> "Portal":
        repository = LedgerRepository(store)
        ledger = await repository.load()
        gate = SessionGate(durable=store, ephemeral=ephemeral or MemoryBlobStore())
        await gate.restore()
        return cls(ledger, repository, gate)

    async def persist(self) -> None:
        """Write the current snapshot after a mutation."""
        await self.repository.save(self.ledger)


# ── Global portal (initialized on startup) ───────────────────
portal: Optional[Portal] = None


async def init_portal(store: Optional[BlobStore] = None) -> Portal:
    global portal
    if store is None:
        store = await build_store()
    portal = await Portal.open(store)
    logger.info(f"Portal ready ({settings.STORE_BACKEND} store)")
    return portal


async def close_portal() -> None:
    global portal
    if portal:
        await portal.repository.store.close()
    portal = None


def get_portal() -> Portal:
    """FastAPI dependency to get the portal."""
    if not portal:
        raise RuntimeError("Portal not initialized. Call init_portal() first.")
    return portal

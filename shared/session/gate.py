"""
shared/session/gate.py
Holds the single active identity of the portal.

A remembered sign-in is written to the durable store and survives restarts;
otherwise it lives in the ephemeral store for this process only. Writing one
target always clears the other, and sign-out clears both.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config.store import BlobStore, Bucket
from shared.session.identity import (
    ANONYMOUS,
    Anonymous,
    Identity,
    identity_from_dict,
    identity_to_dict,
)
from shared.utils.security import create_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveSession:
    identity: Identity
    jti: Optional[str] = None
    remember: bool = False


class SessionGate:
    def __init__(self, durable: BlobStore, ephemeral: BlobStore):
        self.durable = durable
        self.ephemeral = ephemeral
        self.active = ActiveSession(ANONYMOUS)

    @property
    def identity(self) -> Identity:
        return self.active.identity

    @property
    def is_anonymous(self) -> bool:
        return isinstance(self.active.identity, Anonymous)

    async def restore(self) -> Identity:
        """Pick up a stored session: durable target first, then ephemeral."""
        for store, remember in ((self.durable, True), (self.ephemeral, False)):
            result = await store.load(Bucket.SESSION.value, None)
            if result.was_defaulted or not isinstance(result.value, dict):
                continue
            identity = identity_from_dict(result.value.get("identity"))
            if isinstance(identity, Anonymous):
                continue
            self.active = ActiveSession(identity, result.value.get("jti"), remember)
            logger.info(f"Session restored for {identity.role.value} {identity.id}")
            return identity
        self.active = ActiveSession(ANONYMOUS)
        return ANONYMOUS

    async def sign_in(self, identity: Identity, remember: bool) -> tuple[str, int]:
        """
        Make ``identity`` the active session, replacing any previous one.
        Returns (access_token, expires_in) bound to this session.
        """
        token, jti, expires_in = create_access_token(
            user_id=identity.id,
            role=identity.role.value,
            email=identity.email,
            remember=remember,
        )
        record = {"identity": identity_to_dict(identity), "jti": jti}
        if remember:
            await self.durable.save(Bucket.SESSION.value, record)
            await self.ephemeral.delete(Bucket.SESSION.value)
        else:
            await self.ephemeral.save(Bucket.SESSION.value, record)
            await self.durable.delete(Bucket.SESSION.value)

        self.active = ActiveSession(identity, jti, remember)
        logger.info(f"Signed in {identity.role.value} {identity.id} (remember={remember})")
        return token, expires_in

    async def sign_out(self) -> None:
        await self.durable.delete(Bucket.SESSION.value)
        await self.ephemeral.delete(Bucket.SESSION.value)
        if not self.is_anonymous:
            logger.info(f"Signed out {self.identity.role.value} {self.identity.id}")
        self.active = ActiveSession(ANONYMOUS)

    def accepts(self, jti: Optional[str]) -> bool:
        """True when a token with this jti belongs to the active session."""
        return not self.is_anonymous and jti is not None and jti == self.active.jti

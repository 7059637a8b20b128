"""
shared/middleware/auth.py
FastAPI dependency functions for authentication and authorization.
A bearer token is only honoured while it belongs to the portal's active session.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from config.portal import Portal, get_portal
from shared.models.models import UserRole
from shared.session.identity import Identity, TeacherIdentity
from shared.utils.security import verify_access_token

security = HTTPBearer(auto_error=False)


class TokenData:
    def __init__(self, payload: dict):
        self.user_id: str = payload["sub"]
        self.role: UserRole = UserRole(payload["role"])
        self.email: str = payload["email"]
        self.jti: str = payload["jti"]


async def get_token_data(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    portal: Portal = Depends(get_portal),
) -> TokenData:
    """
    Extract and validate JWT from Authorization header.
    Tokens from a replaced or signed-out session are rejected.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_access_token(credentials.credentials)
        token_data = TokenData(payload)
    except (JWTError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not portal.gate.accepts(token_data.jti):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session is no longer active",
        )

    return token_data


async def get_current_identity(
    token_data: TokenData = Depends(get_token_data),
    portal: Portal = Depends(get_portal),
) -> Identity:
    """The active identity, after checking a teacher still exists."""
    identity = portal.gate.identity
    if isinstance(identity, TeacherIdentity):
        if not any(t.id == identity.id for t in portal.ledger.teachers):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )
    return identity


class RoleRequired:
    """Dependency factory for role-based access control."""

    def __init__(self, *roles: UserRole):
        self.roles = roles

    async def __call__(
        self,
        identity: Identity = Depends(get_current_identity),
    ) -> Identity:
        if identity.role not in self.roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required role: {[r.value for r in self.roles]}",
            )
        return identity


# Convenience role dependencies
require_teacher = RoleRequired(UserRole.TEACHER)
require_admin = RoleRequired(UserRole.ADMIN)

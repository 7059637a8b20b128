"""
services/auth/router.py
Teacher registration and portal sign-in.
Implements: Register → Login (remember me) → Session → Logout
"""

from fastapi import APIRouter, Depends, status

from config.portal import Portal, get_portal
from shared.middleware.auth import get_current_identity
from shared.schemas.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    TeacherResponse,
)
from shared.session.identity import Identity, identity_to_dict

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _session_response(portal: Portal) -> SessionResponse:
    data = identity_to_dict(portal.gate.identity) or {}
    return SessionResponse(**data, remembered=portal.gate.active.remember)


@router.post(
    "/register",
    response_model=TeacherResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a teacher account",
)
async def register(
    data: RegisterRequest,
    portal: Portal = Depends(get_portal),
):
    """
    Creates an unapproved teacher with zero hours.
    The admin must approve the account before the teacher can log in.
    """
    teacher = portal.ledger.register_teacher(data.name, data.email, data.password)
    await portal.persist()
    return TeacherResponse.model_validate(teacher)


@router.post("/login", response_model=LoginResponse, summary="Log in as teacher or admin")
async def login(
    data: LoginRequest,
    portal: Portal = Depends(get_portal),
):
    """
    Authenticates against the ledger and makes the caller the active session.
    With `remember`, the session survives restarts; otherwise it lasts for
    this process only. Any previous session is replaced.
    """
    identity = portal.ledger.authenticate(data.email, data.password)
    token, expires_in = await portal.gate.sign_in(identity, data.remember)
    return LoginResponse(
        access_token=token,
        expires_in=expires_in,
        session=_session_response(portal),
    )


@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout(
    identity: Identity = Depends(get_current_identity),
    portal: Portal = Depends(get_portal),
):
    """Clears both the durable and the ephemeral session."""
    await portal.gate.sign_out()
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=SessionResponse, summary="Get current identity")
async def get_me(
    identity: Identity = Depends(get_current_identity),
    portal: Portal = Depends(get_portal),
):
    return _session_response(portal)


@router.get("/session", response_model=SessionResponse, summary="Active session (public)")
async def get_session(portal: Portal = Depends(get_portal)):
    """Who is signed in right now; empty fields when nobody is."""
    return _session_response(portal)

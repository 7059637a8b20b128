"""
services/teacher/router.py
The signed-in teacher's own profile and hour balance.
"""

from fastapi import APIRouter, Depends

from config.portal import Portal, get_portal
from shared.middleware.auth import require_teacher
from shared.schemas.schemas import TeacherResponse
from shared.session.identity import TeacherIdentity

router = APIRouter(prefix="/teachers", tags=["Teachers"])


@router.get("/me", response_model=TeacherResponse)
async def get_me(
    identity: TeacherIdentity = Depends(require_teacher),
    portal: Portal = Depends(get_portal),
):
    """Return the teacher's profile, including remaining hours."""
    return TeacherResponse.model_validate(portal.ledger.get_teacher(identity.id))

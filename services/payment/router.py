"""
services/payment/router.py
Package purchases. A purchase is recorded unverified; hours are credited
only when the admin verifies the payment (see services/admin/router.py).
"""

from fastapi import APIRouter, Depends, status

from config.portal import Portal, get_portal
from shared.middleware.auth import require_teacher
from shared.models.models import PaymentMethod
from shared.schemas.schemas import PurchaseRequest, TransactionResponse
from shared.session.identity import TeacherIdentity

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/purchase", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def purchase_package(
    data: PurchaseRequest,
    identity: TeacherIdentity = Depends(require_teacher),
    portal: Portal = Depends(get_portal),
):
    """
    Request a package. Online payments attach a bank-slip image; on-site
    payments are settled at the studio. Either way the admin verifies.
    """
    tx = portal.ledger.purchase_package(
        identity.id,
        data.package_id,
        PaymentMethod(data.method),
        data.slip_image,
    )
    await portal.persist()
    return TransactionResponse.model_validate(tx)


@router.get("/me/history", response_model=list[TransactionResponse])
async def payment_history(
    identity: TeacherIdentity = Depends(require_teacher),
    portal: Portal = Depends(get_portal),
):
    """The teacher's purchases and top-ups, newest first."""
    return [
        TransactionResponse.model_validate(tx)
        for tx in portal.ledger.teacher_transactions(identity.id)
    ]

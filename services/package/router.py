"""
services/package/router.py
Hour-package catalog. Public listing; create/update/delete are admin-only.
Edits never touch the price or hours captured on existing transactions.
"""

from fastapi import APIRouter, Depends

from config.portal import Portal, get_portal
from shared.middleware.auth import require_admin
from shared.schemas.schemas import MessageResponse, PackageResponse, PackageUpsertRequest
from shared.session.identity import AdminIdentity

router = APIRouter(prefix="/packages", tags=["Packages"])


@router.get("", response_model=list[PackageResponse])
async def list_packages(portal: Portal = Depends(get_portal)):
    return [PackageResponse.model_validate(p) for p in portal.ledger.packages]


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(package_id: str, portal: Portal = Depends(get_portal)):
    return PackageResponse.model_validate(portal.ledger.get_package(package_id))


@router.put("/{package_id}", response_model=PackageResponse)
async def upsert_package(
    package_id: str,
    data: PackageUpsertRequest,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """Create the package if the id is new, otherwise replace it."""
    package = portal.ledger.upsert_package(data.to_package(package_id))
    await portal.persist()
    return PackageResponse.model_validate(package)


@router.delete("/{package_id}", response_model=MessageResponse)
async def delete_package(
    package_id: str,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    portal.ledger.delete_package(package_id)
    await portal.persist()
    return MessageResponse(message="Package deleted")

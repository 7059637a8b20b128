"""
services/cms/router.py
Landing-page content, pricing tiers and the theme preference.
"""

from fastapi import APIRouter, Depends

from config.portal import Portal, get_portal
from shared.middleware.auth import require_admin
from shared.models.models import CMSConfig, Theme
from shared.schemas.schemas import ThemeRequest, ThemeResponse
from shared.session.identity import AdminIdentity

router = APIRouter(tags=["CMS"])


@router.get("/cms", response_model=CMSConfig)
async def get_cms(portal: Portal = Depends(get_portal)):
    return portal.ledger.cms


@router.put("/cms", response_model=CMSConfig)
async def replace_cms(
    data: CMSConfig,
    admin: AdminIdentity = Depends(require_admin),
    portal: Portal = Depends(get_portal),
):
    """
    Replace the whole CMS record. New pricing applies to future bookings
    only; existing bookings keep their cost.
    """
    cms = portal.ledger.update_cms(data)
    await portal.persist()
    return cms


@router.get("/theme", response_model=ThemeResponse)
async def get_theme(portal: Portal = Depends(get_portal)):
    theme = await portal.repository.load_theme()
    return ThemeResponse(theme=theme.value)


@router.put("/theme", response_model=ThemeResponse)
async def set_theme(data: ThemeRequest, portal: Portal = Depends(get_portal)):
    theme = Theme(data.theme)
    await portal.repository.save_theme(theme)
    return ThemeResponse(theme=theme.value)

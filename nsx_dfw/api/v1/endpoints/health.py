"""
Health check endpoint for monitoring and diagnostics.
"""
import logging
from fastapi import APIRouter, HTTPException, Request, status

from nsx_dfw.core.config import settings
from nsx_dfw.core.errors import NSXError
from nsx_dfw.core.nsx import get_firewall

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    """
    Health check endpoint that verifies:
    - API is running
    - NSX manager is reachable and the managed section exists

    Returns:
        {
            "ok": true,
            "nsx": true,
            "section_id": "...",
            "environment": "..."
        }
    """
    try:
        firewall = get_firewall(request)
        section = firewall.sections.find_section_by_id()
    except NSXError as e:
        logger.error(f"NSX health check failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="NSX manager unreachable"
        )

    if not section:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Managed section {firewall.section_id} not found"
        )

    return {
        "ok": True,
        "nsx": True,
        "section_id": section.id,
        "environment": settings.APP_ENV,
    }

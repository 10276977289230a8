"""
Firewall section endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query

from nsx_dfw.core.auth import verify_api_key
from nsx_dfw.core.nsx import get_firewall
from nsx_dfw.schemas.section import Section, SectionListResponse
from nsx_dfw.services.firewall import DistributedFirewall

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=SectionListResponse)
def list_sections(firewall: DistributedFirewall = Depends(get_firewall)):
    """List all sections visible to the configured NSX credential."""
    sections = firewall.sections.list_sections()
    return SectionListResponse(items=sections, total=len(sections))


@router.get("/managed", response_model=Section)
def get_managed_section(firewall: DistributedFirewall = Depends(get_firewall)):
    """Get the section owned by this integration, as currently stored."""
    section = firewall.sections.find_section_by_id()
    if not section:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Managed section {firewall.section_id} not found"
        )
    return section


@router.get("/{section_id}", response_model=Section)
def get_section(section_id: str, firewall: DistributedFirewall = Depends(get_firewall)):
    """Get a specific section by ID."""
    section = firewall.sections.find_section_by_id(section_id)
    if not section:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Section with id {section_id} not found"
        )
    return section


@router.delete("/{section_id}", status_code=status.HTTP_200_OK)
def delete_section(
    section_id: str,
    cascade: bool = Query(False, description="Also delete the rules the section contains"),
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Delete a section. The manager does not report whether it existed."""
    firewall.sections.delete_section(section_id, cascade=cascade)
    return {"message": "Section delete issued", "id": section_id, "cascade": cascade}

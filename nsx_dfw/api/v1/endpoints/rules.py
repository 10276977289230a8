"""
Firewall rule endpoints.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query

from nsx_dfw.core.auth import verify_api_key
from nsx_dfw.core.nsx import get_firewall
from nsx_dfw.schemas.rule import Rule, RuleListResponse, RuleSpec
from nsx_dfw.services.firewall import DistributedFirewall

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=RuleListResponse)
def list_rules(
    section_id: Optional[str] = Query(None, description="Section to list (managed section by default)"),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """List the rules of a section."""
    rules = firewall.rules.list_rules(section_id)
    return RuleListResponse(items=rules, total=len(rules))


@router.get("/by-name", response_model=Rule)
def get_rule_by_name(
    name: str = Query(..., min_length=1, description="Exact rule display name"),
    section_id: Optional[str] = Query(None, description="Section to search (managed section by default)"),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Find a rule by display name."""
    rule = firewall.rules.find_rule_by_name(name, section_id)
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule named '{name}' not found"
        )
    return rule


@router.get("/{rule_id}", response_model=Rule)
def get_rule(rule_id: str, firewall: DistributedFirewall = Depends(get_firewall)):
    """Get a specific rule by ID."""
    rule = firewall.rules.find_rule_by_id(rule_id)
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule with id {rule_id} not found"
        )
    return rule


@router.post("/", response_model=Rule, status_code=status.HTTP_201_CREATED)
def create_rule(
    request: RuleSpec,
    section_id: Optional[str] = Query(None),
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Create a rule; the section's current revision is attached automatically."""
    return firewall.rules.create_rule(request.to_body(), section_id)


@router.put("/{rule_id}", response_model=Rule)
def update_rule(
    rule_id: str,
    request: RuleSpec,
    section_id: Optional[str] = Query(None),
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Replace a rule; the rule's current revision is attached automatically."""
    return firewall.rules.update_rule(rule_id, request.to_body(), section_id)


@router.delete("/{rule_id}", status_code=status.HTTP_200_OK)
def delete_rule(
    rule_id: str,
    section_id: Optional[str] = Query(None),
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Delete a rule and confirm it is gone. Deleting an absent rule succeeds."""
    firewall.rules.delete_rule(rule_id, section_id)
    return {"message": "Rule deleted successfully", "id": rule_id}

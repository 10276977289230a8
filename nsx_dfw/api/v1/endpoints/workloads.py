"""
Workload teardown endpoints.
"""
import logging
from fastapi import APIRouter, Body, Depends

from nsx_dfw.core.auth import verify_api_key
from nsx_dfw.core.nsx import get_firewall
from nsx_dfw.schemas.workload import CleanupResponse, RuleNamesResponse, Workload
from nsx_dfw.services.cleanup_service import derive_rule_names
from nsx_dfw.services.firewall import DistributedFirewall
from nsx_dfw.utils.template_parser import parse_vm_template

logger = logging.getLogger(__name__)

router = APIRouter()


def _cleanup(firewall: DistributedFirewall, workload: Workload) -> CleanupResponse:
    deleted = firewall.clear_workload_rules(workload)
    return CleanupResponse(
        vm_id=workload.vm_id,
        derived=len(derive_rule_names(workload)),
        deleted=deleted,
    )


@router.post("/rule-names", response_model=RuleNamesResponse)
def rule_names(workload: Workload):
    """Derive the rule names this integration uses for a workload."""
    return RuleNamesResponse(
        vm_id=workload.vm_id,
        rule_names=sorted(derive_rule_names(workload)),
    )


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_workload(
    workload: Workload,
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Remove every managed-section rule that belongs to a workload."""
    return _cleanup(firewall, workload)


@router.post("/cleanup/template", response_model=CleanupResponse)
def cleanup_workload_template(
    template: str = Body(..., media_type="application/xml", description="VM XML template, plain or base64"),
    _: str = Depends(verify_api_key),
    firewall: DistributedFirewall = Depends(get_firewall),
):
    """Remove the rules of the VM described by an OpenNebula XML template."""
    return _cleanup(firewall, parse_vm_template(template))

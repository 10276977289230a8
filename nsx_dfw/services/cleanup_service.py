"""
Rule-name derivation and workload rule cleanup.

Rules created for a workload are named after the (security group, VM, NIC)
they implement, so the same names can be rebuilt from the workload
description at teardown and used to find the rules again.
"""
import logging
from typing import List, Optional, Set

from nsx_dfw.core.constants import RULE_NAME_TEMPLATE
from nsx_dfw.schemas.workload import Workload
from nsx_dfw.services.rule_service import RuleRepository

logger = logging.getLogger(__name__)


def rule_name(
    sg_id: str, sg_name: str, vm_id: str, deploy_id: str, network_id: str
) -> str:
    """Build the identity string of the rule for one security group on one NIC."""
    return RULE_NAME_TEMPLATE.format(
        sg_id=sg_id,
        sg_name=sg_name,
        vm_id=vm_id,
        deploy_id=deploy_id,
        network_id=network_id,
    )


def derive_rule_names(workload: Workload) -> Set[str]:
    """
    Compute the names of the rules this integration creates for a workload.

    For every NIC, every security group the NIC belongs to, and every
    security-group-rule entry of that group, one identity string.
    """
    names: Set[str] = set()
    for nic in workload.nics:
        for sg_id in nic.security_groups:
            for sg_rule in workload.security_group_rules:
                if sg_rule.security_group_id != sg_id:
                    continue
                names.add(
                    rule_name(
                        sg_rule.security_group_id,
                        sg_rule.security_group_name,
                        workload.vm_id,
                        workload.deploy_id,
                        nic.network_id,
                    )
                )
    return names


class WorkloadRuleCleaner:
    """Removes the rules belonging to a decommissioned workload."""

    def __init__(self, rules: RuleRepository):
        self.rules = rules

    def clear_workload_rules(
        self, workload: Workload, section_id: Optional[str] = None
    ) -> List[str]:
        """
        Delete every rule derived for the workload that still exists.

        Names with no matching rule are skipped, so running this twice, or on
        a workload that never had rules, is a no-op.

        Returns:
            Names of the rules deleted by this call, sorted
        """
        deleted: List[str] = []
        for name in sorted(derive_rule_names(workload)):
            rule = self.rules.find_rule_by_name(name, section_id)
            if not rule:
                logger.debug(f"No DFW rule named '{name}', skipping")
                continue
            self.rules.delete_rule(rule.id, section_id)
            deleted.append(name)

        logger.info(f"Cleared {len(deleted)} DFW rule(s) for VM {workload.vm_id}")
        return deleted

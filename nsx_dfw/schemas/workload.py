"""Schemas for workload (VM) descriptions used to derive rule names."""
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class SecurityGroupRule(BaseModel):
    """A security-group-rule entry of a workload template."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    security_group_id: str
    security_group_name: str = ""


class WorkloadNIC(BaseModel):
    """A workload network interface and the security groups it belongs to."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    network_id: str
    security_groups: List[str] = Field(default_factory=list)


class Workload(BaseModel):
    """Identifiers and security-group memberships of a VM."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    vm_id: str
    deploy_id: str = ""
    nics: List[WorkloadNIC] = Field(default_factory=list)
    security_group_rules: List[SecurityGroupRule] = Field(default_factory=list)


class RuleNamesResponse(BaseModel):
    """Rule identity strings derived for a workload."""
    vm_id: str
    rule_names: List[str]


class CleanupResponse(BaseModel):
    """Result of removing a workload's rules."""
    vm_id: str
    derived: int
    deleted: List[str]

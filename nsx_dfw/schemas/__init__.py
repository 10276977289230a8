"""API and domain schemas."""
from nsx_dfw.schemas.section import Section, SectionCreateSpec, SectionListResponse
from nsx_dfw.schemas.rule import Rule, RuleSpec, RuleListResponse
from nsx_dfw.schemas.workload import (
    Workload,
    WorkloadNIC,
    SecurityGroupRule,
    RuleNamesResponse,
    CleanupResponse,
)

__all__ = [
    "Section",
    "SectionCreateSpec",
    "SectionListResponse",
    "Rule",
    "RuleSpec",
    "RuleListResponse",
    "Workload",
    "WorkloadNIC",
    "SecurityGroupRule",
    "RuleNamesResponse",
    "CleanupResponse",
]

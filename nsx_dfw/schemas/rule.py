"""Schemas for distributed firewall rules."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from nsx_dfw.core.constants import REVISION_FIELD

# Server-managed or identity fields that are not part of a rule's payload
_RULE_ENVELOPE = {"id", "display_name", "section_id", REVISION_FIELD}


class Rule(BaseModel):
    """
    A firewall rule as returned by the NSX manager.

    Only the identity fields are typed; match/action fields (sources,
    destinations, services, action, direction, ...) are kept as extra
    attributes and passed through untouched.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    display_name: str
    section_id: Optional[str] = None
    revision: Optional[Any] = Field(None, alias="_revision", description="Opaque revision token")

    @property
    def payload(self) -> Dict[str, Any]:
        """Opaque rule fields, everything except identity and revision."""
        return dict(self.model_extra or {})


class RuleSpec(BaseModel):
    """Request schema for creating or updating a rule."""
    model_config = ConfigDict(extra="allow")

    display_name: str = Field(..., min_length=1, description="Rule name, used as lookup key")

    def to_body(self) -> Dict[str, Any]:
        """Wire body without any client-supplied revision or identity fields."""
        body = self.model_dump()
        for key in _RULE_ENVELOPE - {"display_name"}:
            body.pop(key, None)
        return body


class RuleListResponse(BaseModel):
    """Response schema for rule list."""
    items: List[Rule]
    total: int

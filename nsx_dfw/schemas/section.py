"""Schemas for distributed firewall sections."""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from nsx_dfw.core.constants import SECTION_TYPE_LAYER3


class Section(BaseModel):
    """A firewall section as returned by the NSX manager."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    display_name: str
    section_type: str = SECTION_TYPE_LAYER3
    stateful: bool = True
    revision: Optional[Any] = Field(None, alias="_revision", description="Opaque revision token")


class SectionCreateSpec(BaseModel):
    """Body for creating the managed section. Type and statefulness are fixed."""
    display_name: str = Field(..., min_length=1)
    section_type: str = SECTION_TYPE_LAYER3
    stateful: bool = True


class SectionListResponse(BaseModel):
    """Response schema for section list."""
    items: List[Section]
    total: int

"""
Repository for distributed firewall sections.
"""
import logging
from typing import List, Optional

from nsx_dfw.core.constants import NSXT_DFW_BASE, NSXT_DFW_SECTIONS
from nsx_dfw.core.errors import CreateError, IntegrityError, NSXError
from nsx_dfw.schemas.section import Section, SectionCreateSpec
from nsx_dfw.utils.nsx_lookup import collect_results, pick_by_name

logger = logging.getLogger(__name__)


class SectionRepository:
    """CRUD over firewall sections on the NSX manager."""

    def __init__(
        self,
        client,
        managed_section_id: Optional[str] = None,
        duplicate_policy: str = "error",
    ):
        """
        Initialize section repository.

        Args:
            client: NSX transport exposing get/post/put/delete
            managed_section_id: Default section id for calls that omit one
            duplicate_policy: "error" or "last", see pick_by_name
        """
        self.client = client
        self.managed_section_id = managed_section_id
        self.duplicate_policy = duplicate_policy
        self.url_sections = NSXT_DFW_BASE + NSXT_DFW_SECTIONS

    def _section_url(self, section_id: str) -> str:
        return f"{self.url_sections}/{section_id}"

    def _resolve(self, section_id: Optional[str]) -> str:
        section_id = section_id or self.managed_section_id
        if not section_id:
            raise ValueError("No section id given and no managed section resolved")
        return section_id

    def list_sections(self) -> List[Section]:
        """Get all sections visible to this credential (empty list if none)."""
        results = collect_results(self.client, self.url_sections)
        if not results:
            return []
        return [Section.model_validate(item) for item in results]

    def find_section_by_name(self, name: str) -> Optional[Section]:
        """Get the section with display_name == name, or None."""
        return pick_by_name(self.list_sections(), name, self.duplicate_policy, "section")

    def find_section_by_id(self, section_id: Optional[str] = None) -> Optional[Section]:
        """Get a section by id (managed section by default), or None."""
        result = self.client.get(self._section_url(self._resolve(section_id)))
        if not result:
            return None
        return Section.model_validate(result)

    def create_section(self, name: str) -> Section:
        """
        Create a LAYER3 stateful section and return it as stored.

        Raises:
            CreateError: The manager rejected the create call
            IntegrityError: The create was accepted but the section cannot be read back
        """
        spec = SectionCreateSpec(display_name=name)
        try:
            created = self.client.post(self.url_sections, spec.model_dump())
        except NSXError as e:
            raise CreateError(f"Error creating section '{name}' in NSX: {e}") from e

        section_id = (created or {}).get("id")
        result = self.find_section_by_id(section_id) if section_id else None
        if not result:
            raise IntegrityError(
                f"Section '{name}' was not created in DFW (returned id: {section_id})"
            )

        logger.info(f"Created DFW section: id={result.id}, name={name}")
        return result

    def ensure_managed_section(self, name: str) -> Section:
        """
        Return the section named name, creating it if it does not exist.

        Safe to call on every start: an existing section is never duplicated.
        """
        section = self.find_section_by_name(name)
        if section:
            logger.debug(f"Found DFW section '{name}': id={section.id}")
        else:
            logger.info(f"DFW section '{name}' not found, creating it")
            section = self.create_section(name)
        self.managed_section_id = section.id
        return section

    def delete_section(self, section_id: Optional[str] = None, cascade: bool = False) -> None:
        """
        Delete a section (managed section by default).

        No existence check before or after. cascade=True also removes the
        rules the section still contains.
        """
        section_id = self._resolve(section_id)
        params = {"cascade": "true"} if cascade else None
        self.client.delete(self._section_url(section_id), params=params)
        logger.info(f"Deleted DFW section: id={section_id}, cascade={cascade}")

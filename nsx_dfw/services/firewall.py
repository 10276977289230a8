"""
Distributed firewall handle.

DistributedFirewall.initialize resolves (or creates) the managed section once
and returns a handle that carries its id into the rule repository and the
cleanup orchestrator. Callers keep the handle; there is no module-level
section id.
"""
import logging
import threading
from typing import List, Optional, Union

from nsx_dfw.core.config import Settings, settings as default_settings
from nsx_dfw.schemas.section import Section
from nsx_dfw.schemas.workload import Workload
from nsx_dfw.services.cleanup_service import WorkloadRuleCleaner
from nsx_dfw.services.rule_service import RuleRepository
from nsx_dfw.services.section_service import SectionRepository
from nsx_dfw.utils.template_parser import parse_vm_template

logger = logging.getLogger(__name__)

# Serializes find-or-create of the managed section within the process
_init_lock = threading.Lock()


class DistributedFirewall:
    """The managed section plus the repositories bound to it."""

    def __init__(self, client, section: Section, config: Optional[Settings] = None):
        config = config or default_settings
        self.client = client
        self.section = section
        self.sections = SectionRepository(
            client,
            managed_section_id=section.id,
            duplicate_policy=config.DUPLICATE_NAME_POLICY,
        )
        self.rules = RuleRepository(
            client,
            managed_section_id=section.id,
            duplicate_policy=config.DUPLICATE_NAME_POLICY,
            conflict_attempts=config.CONFLICT_RETRY_ATTEMPTS,
            conflict_backoff=config.CONFLICT_RETRY_BACKOFF,
        )
        self.cleaner = WorkloadRuleCleaner(self.rules)

    @property
    def section_id(self) -> str:
        return self.section.id

    @classmethod
    def initialize(
        cls,
        client,
        section_name: Optional[str] = None,
        config: Optional[Settings] = None,
    ) -> "DistributedFirewall":
        """
        Find or create the managed section and return a handle bound to it.

        Args:
            client: NSX transport
            section_name: Managed section name (MANAGED_SECTION_NAME by default)
            config: Settings override
        """
        config = config or default_settings
        section_name = section_name or config.MANAGED_SECTION_NAME
        repository = SectionRepository(client, duplicate_policy=config.DUPLICATE_NAME_POLICY)
        with _init_lock:
            section = repository.ensure_managed_section(section_name)
        logger.info(f"Managing DFW section '{section.display_name}' (id={section.id})")
        return cls(client, section, config)

    def clear_workload_rules(self, workload: Workload) -> List[str]:
        """Remove the managed-section rules of a workload."""
        return self.cleaner.clear_workload_rules(workload, self.section_id)

    def clear_template_rules(self, template: Union[str, bytes]) -> List[str]:
        """Remove the managed-section rules of the VM described by an XML template."""
        return self.clear_workload_rules(parse_vm_template(template))

    def teardown(self, cascade: bool = True) -> None:
        """Delete the managed section (integration teardown)."""
        self.sections.delete_section(self.section_id, cascade=cascade)

"""
Repository for distributed firewall rules.

Every structural change carries the current _revision of the object it
modifies: the section's revision for a create, the rule's own revision for
an update. The NSX manager rejects a stale revision with 412, which the
transport raises as RevisionConflictError; create and update re-read the
revision and retry a bounded number of times before giving up.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from nsx_dfw.core.constants import (
    NSXT_DFW_BASE,
    NSXT_DFW_RULES,
    NSXT_DFW_SECTIONS,
    REVISION_FIELD,
)
from nsx_dfw.core.errors import (
    IntegrityError,
    ObjectNotFound,
    OperationError,
    RevisionConflictError,
)
from nsx_dfw.schemas.rule import Rule
from nsx_dfw.utils.nsx_lookup import collect_results, pick_by_name

logger = logging.getLogger(__name__)


class RuleRepository:
    """CRUD over firewall rules scoped to a section."""

    def __init__(
        self,
        client,
        managed_section_id: Optional[str] = None,
        duplicate_policy: str = "error",
        conflict_attempts: int = 3,
        conflict_backoff: float = 0.5,
    ):
        """
        Initialize rule repository.

        Args:
            client: NSX transport exposing get/post/put/delete
            managed_section_id: Default section id for calls that omit one
            duplicate_policy: "error" or "last", see pick_by_name
            conflict_attempts: Attempts for a write rejected with a stale revision
            conflict_backoff: Exponential backoff multiplier in seconds
        """
        self.client = client
        self.managed_section_id = managed_section_id
        self.duplicate_policy = duplicate_policy
        self.conflict_attempts = max(1, conflict_attempts)
        self.conflict_backoff = conflict_backoff
        self.url_sections = NSXT_DFW_BASE + NSXT_DFW_SECTIONS
        self.url_rules = NSXT_DFW_BASE + NSXT_DFW_RULES

    def _section_rules_url(self, section_id: str) -> str:
        return f"{self.url_sections}/{section_id}/rules"

    def _resolve(self, section_id: Optional[str]) -> str:
        section_id = section_id or self.managed_section_id
        if not section_id:
            raise ValueError("No section id given and no managed section resolved")
        return section_id

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception_type(RevisionConflictError),
            stop=stop_after_attempt(self.conflict_attempts),
            wait=wait_exponential(multiplier=self.conflict_backoff, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def list_rules(self, section_id: Optional[str] = None) -> List[Rule]:
        """
        Get all rules of a section (managed section by default).

        Raises:
            ObjectNotFound: The section does not exist
        """
        section_id = self._resolve(section_id)
        results = collect_results(self.client, self._section_rules_url(section_id))
        if results is None:
            raise ObjectNotFound(f"Section with id {section_id} not found")
        return [Rule.model_validate(item) for item in results]

    def find_rule_by_id(self, rule_id: str) -> Optional[Rule]:
        """Get a rule by id, or None."""
        result = self.client.get(f"{self.url_rules}/{rule_id}")
        if not result:
            return None
        return Rule.model_validate(result)

    def find_rule_by_name(self, name: str, section_id: Optional[str] = None) -> Optional[Rule]:
        """Get the rule named name in a section, or None when there is no section to search."""
        section_id = section_id or self.managed_section_id
        if not section_id:
            return None
        return pick_by_name(self.list_rules(section_id), name, self.duplicate_policy, "rule")

    def create_rule(self, spec: Mapping[str, Any], section_id: Optional[str] = None) -> Rule:
        """
        Create a rule in a section (managed section by default).

        Raises:
            ObjectNotFound: The section does not exist
            RevisionConflictError: The section kept changing for every attempt
            OperationError: The manager did not acknowledge the create
        """
        section_id = self._resolve(section_id)
        for attempt in self._retrying():
            with attempt:
                created = self._create_once(spec, section_id)
        rule = Rule.model_validate(created)
        logger.info(
            f"Created DFW rule: id={rule.id}, name={rule.display_name}, section={section_id}"
        )
        return rule

    def _create_once(self, spec: Mapping[str, Any], section_id: str) -> Dict[str, Any]:
        section = self.client.get(f"{self.url_sections}/{section_id}")
        if not section:
            raise ObjectNotFound(f"Section with id {section_id} not found")

        body = dict(spec)
        body[REVISION_FIELD] = section.get(REVISION_FIELD)
        result = self.client.post(self._section_rules_url(section_id), body)
        if not result:
            raise OperationError(
                f"Error creating DFW rule '{spec.get('display_name')}' in section {section_id}"
            )
        return result

    def update_rule(
        self, rule_id: str, spec: Mapping[str, Any], section_id: Optional[str] = None
    ) -> Rule:
        """
        Replace a rule, presenting the rule's current revision.

        Raises:
            ObjectNotFound: The rule does not exist
            RevisionConflictError: The rule kept changing for every attempt
            OperationError: The manager did not acknowledge the update
        """
        section_id = self._resolve(section_id)
        for attempt in self._retrying():
            with attempt:
                updated = self._update_once(rule_id, spec, section_id)
        logger.info(f"Updated DFW rule: id={rule_id}, section={section_id}")
        return Rule.model_validate(updated)

    def _update_once(
        self, rule_id: str, spec: Mapping[str, Any], section_id: str
    ) -> Dict[str, Any]:
        rule = self.find_rule_by_id(rule_id)
        if not rule:
            raise ObjectNotFound(f"Rule id {rule_id} not found")

        body = dict(spec)
        body[REVISION_FIELD] = rule.revision
        result = self.client.put(f"{self._section_rules_url(section_id)}/{rule_id}", body)
        if not result:
            raise OperationError(f"Error updating DFW rule {rule_id}")
        return result

    def delete_rule(self, rule_id: str, section_id: Optional[str] = None) -> None:
        """
        Delete a rule and confirm it is gone.

        The delete endpoint answers 200 even for ids that never existed, so
        only a follow-up lookup proves the deletion. Deleting an absent rule
        is a no-op.

        Raises:
            IntegrityError: The rule is still resolvable after the delete
        """
        section_id = self._resolve(section_id)
        self.client.delete(f"{self._section_rules_url(section_id)}/{rule_id}")
        if self.find_rule_by_id(rule_id):
            raise IntegrityError(f"Error deleting rule {rule_id} in DFW: rule still exists")
        logger.info(f"Deleted DFW rule: id={rule_id}, section={section_id}")

"""
Parser for OpenNebula VM templates.

Extracts the identifiers the rule-name derivation needs from the VM XML
document the virtualization drivers receive (plain or base64 encoded).
"""
import base64
import binascii
import logging
import xml.etree.ElementTree as ET
from typing import List, Union

from nsx_dfw.core.errors import TemplateParseError
from nsx_dfw.schemas.workload import SecurityGroupRule, Workload, WorkloadNIC

logger = logging.getLogger(__name__)


def _decode(template: Union[str, bytes]) -> str:
    if isinstance(template, bytes):
        try:
            template = template.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TemplateParseError(f"Template is not valid UTF-8: {e}") from e
    text = template.strip()
    if text.startswith("<"):
        return text
    try:
        return base64.b64decode(text, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TemplateParseError(f"Template is neither XML nor base64 encoded XML: {e}") from e


def _text(element: ET.Element, path: str) -> str:
    return (element.findtext(path) or "").strip()


def _split_groups(value: str) -> List[str]:
    return [sg.strip() for sg in value.split(",") if sg.strip()]


def parse_vm_template(template: Union[str, bytes]) -> Workload:
    """
    Parse a VM template into a workload description.

    Args:
        template: VM XML document, plain or base64 encoded

    Returns:
        Workload with VM id, deploy id, NICs and security group rules

    Raises:
        TemplateParseError: The document is not a valid VM template
    """
    try:
        root = ET.fromstring(_decode(template))
    except ET.ParseError as e:
        raise TemplateParseError(f"Invalid VM template XML: {e}") from e

    if root.tag != "VM":
        raise TemplateParseError(f"Expected a VM document, got <{root.tag}>")

    vm_id = _text(root, "ID")
    if not vm_id:
        raise TemplateParseError("VM template has no ID")

    # DEPLOY_ID lives at the top level and in each HISTORY record
    deploy_id = _text(root, "DEPLOY_ID") or _text(root, ".//DEPLOY_ID")

    nics = [
        WorkloadNIC(
            network_id=_text(nic, "NETWORK_ID"),
            security_groups=_split_groups(_text(nic, "SECURITY_GROUPS")),
        )
        for nic in root.findall("./TEMPLATE/NIC")
    ]

    sg_rules = [
        SecurityGroupRule(
            security_group_id=_text(rule, "SECURITY_GROUP_ID"),
            security_group_name=_text(rule, "SECURITY_GROUP_NAME"),
        )
        for rule in root.findall("./TEMPLATE/SECURITY_GROUP_RULE")
    ]

    logger.debug(
        f"Parsed VM template {vm_id}: {len(nics)} NIC(s), {len(sg_rules)} security group rule(s)"
    )
    return Workload(vm_id=vm_id, deploy_id=deploy_id, nics=nics, security_group_rules=sg_rules)

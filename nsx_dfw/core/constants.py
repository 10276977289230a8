"""NSX-T distributed firewall API constants."""

NSXT_DFW_BASE = "/api/v1/firewall"
NSXT_DFW_SECTIONS = "/sections"
NSXT_DFW_RULES = "/rules"

SECTION_TYPE_LAYER3 = "LAYER3"

# Field NSX uses for optimistic concurrency on every writable object
REVISION_FIELD = "_revision"

RULE_NAME_TEMPLATE = "{sg_id} - {sg_name} - {vm_id} - {deploy_id} - {network_id}"

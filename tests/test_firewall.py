"""
Tests for the distributed firewall handle.
"""
import threading

from nsx_dfw.core.config import Settings
from nsx_dfw.services.firewall import DistributedFirewall
from tests.test_template_parser import SAMPLE_VM_TEMPLATE

SECTION_NAME = "ONE-managed"


def test_initialize_creates_section(store, test_settings):
    firewall = DistributedFirewall.initialize(store, SECTION_NAME, config=test_settings)

    assert list(store.sections) == [firewall.section_id]
    assert store.sections[firewall.section_id]["display_name"] == SECTION_NAME
    assert firewall.rules.managed_section_id == firewall.section_id
    assert firewall.sections.managed_section_id == firewall.section_id


def test_initialize_reuses_existing_section(store, test_settings, managed_section_id):
    firewall = DistributedFirewall.initialize(store, SECTION_NAME, config=test_settings)

    assert firewall.section_id == managed_section_id
    assert store.count("POST") == 0


def test_initialize_uses_configured_name(store):
    config = Settings(MANAGED_SECTION_NAME="Custom", CONFLICT_RETRY_BACKOFF=0)

    firewall = DistributedFirewall.initialize(store, config=config)

    assert firewall.section.display_name == "Custom"


def test_concurrent_initialize_creates_one_section(store, test_settings):
    handles = []

    def start():
        handles.append(DistributedFirewall.initialize(store, SECTION_NAME, config=test_settings))

    threads = [threading.Thread(target=start) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store.sections) == 1
    assert {h.section_id for h in handles} == set(store.sections)


def test_handles_are_independent(store, test_settings):
    """Two handles can manage two sections in the same process."""
    first = DistributedFirewall.initialize(store, "ONE-a", config=test_settings)
    second = DistributedFirewall.initialize(store, "ONE-b", config=test_settings)

    first.rules.create_rule({"display_name": "r"})

    assert first.rules.find_rule_by_name("r") is not None
    assert second.rules.find_rule_by_name("r") is None


def test_conflict_settings_reach_rule_repository(store):
    config = Settings(CONFLICT_RETRY_ATTEMPTS=5, CONFLICT_RETRY_BACKOFF=0, DUPLICATE_NAME_POLICY="last")

    firewall = DistributedFirewall.initialize(store, SECTION_NAME, config=config)

    assert firewall.rules.conflict_attempts == 5
    assert firewall.rules.duplicate_policy == "last"


def test_clear_template_rules(store, firewall):
    store.add_rule(firewall.section_id, "10 - web - 7 - one-7 - 5")
    store.add_rule(firewall.section_id, "0 - default - 7 - one-7 - 5")
    keep_id = store.add_rule(firewall.section_id, "0 - default - 7 - one-7 - 6")

    deleted = firewall.clear_template_rules(SAMPLE_VM_TEMPLATE)

    assert deleted == ["0 - default - 7 - one-7 - 5", "10 - web - 7 - one-7 - 5"]
    assert list(store.rules) == [keep_id]


def test_teardown_removes_section_and_rules(store, firewall):
    store.add_rule(firewall.section_id, "r")

    firewall.teardown()

    assert store.sections == {}
    assert store.rules == {}

"""
Pytest configuration and fixtures.
"""
import copy
import itertools
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from nsx_dfw.core.config import Settings
from nsx_dfw.core.constants import NSXT_DFW_BASE
from nsx_dfw.core.errors import IncorrectResponseCodeError, RevisionConflictError
from nsx_dfw.main import app
from nsx_dfw.services.firewall import DistributedFirewall
from nsx_dfw.services.rule_service import RuleRepository
from nsx_dfw.services.section_service import SectionRepository

SECTION_NAME = "ONE-managed"


class FakeNSXStore:
    """
    In-memory stand-in for the NSX manager transport.

    Behaves like the real DFW API where it matters: server-assigned ids,
    _revision checks on writes (412 -> RevisionConflictError), 404 -> None on
    GET, and DELETE that succeeds for ids that never existed.
    """

    def __init__(self):
        self.sections = {}
        self.rules = {}
        self.calls = []
        self._ids = itertools.count(1)
        # Called with (method, parts) before a write is checked; tests use it
        # to simulate another actor changing an object concurrently.
        self.before_write = None
        self.ignore_deletes = False
        self.page_size = None

    def _new_id(self, prefix):
        return f"{prefix}-{next(self._ids)}"

    @staticmethod
    def _parts(path):
        assert path.startswith(NSXT_DFW_BASE), path
        return [p for p in path[len(NSXT_DFW_BASE):].split("/") if p]

    def _page(self, items, params):
        if not self.page_size:
            return {"results": items, "result_count": len(items)}
        start = int((params or {}).get("cursor", 0))
        end = start + self.page_size
        page = {"results": items[start:end], "result_count": len(items)}
        if end < len(items):
            page["cursor"] = str(end)
        return page

    # Helpers for tests

    def add_section(self, name, **fields):
        section_id = self._new_id("section")
        self.sections[section_id] = {
            "id": section_id,
            "display_name": name,
            "section_type": "LAYER3",
            "stateful": True,
            "_revision": 0,
            **fields,
        }
        return section_id

    def add_rule(self, section_id, name, **fields):
        rule_id = self._new_id("rule")
        self.rules[rule_id] = {
            "id": rule_id,
            "display_name": name,
            "section_id": section_id,
            "_revision": 0,
            **fields,
        }
        self.sections[section_id]["_revision"] += 1
        return rule_id

    def touch_rule(self, rule_id, **fields):
        """Simulate another actor modifying a rule."""
        self.rules[rule_id].update(fields)
        self.rules[rule_id]["_revision"] += 1

    def count(self, method, suffix=""):
        return len([c for c in self.calls if c[0] == method and c[1].endswith(suffix)])

    # Transport interface

    def get(self, path, params=None):
        self.calls.append(("GET", path))
        parts = self._parts(path)
        if parts == ["sections"]:
            return self._page([copy.deepcopy(s) for s in self.sections.values()], params)
        if len(parts) == 2 and parts[0] == "sections":
            return copy.deepcopy(self.sections.get(parts[1]))
        if len(parts) == 3 and parts[2] == "rules":
            if parts[1] not in self.sections:
                return None
            rules = [copy.deepcopy(r) for r in self.rules.values() if r["section_id"] == parts[1]]
            return self._page(rules, params)
        if len(parts) == 2 and parts[0] == "rules":
            return copy.deepcopy(self.rules.get(parts[1]))
        raise AssertionError(f"Unexpected GET {path}")

    def post(self, path, body):
        self.calls.append(("POST", path))
        parts = self._parts(path)
        if parts == ["sections"]:
            section_id = self.add_section(body["display_name"])
            self.sections[section_id].update(section_type=body["section_type"], stateful=body["stateful"])
            return copy.deepcopy(self.sections[section_id])
        if len(parts) == 3 and parts[2] == "rules":
            if self.before_write:
                self.before_write("POST", parts)
            section = self.sections.get(parts[1])
            if section is None:
                raise IncorrectResponseCodeError("section not found", status_code=404)
            if body.get("_revision") != section["_revision"]:
                raise RevisionConflictError("stale section revision", status_code=412)
            fields = {k: v for k, v in body.items() if k not in ("_revision", "display_name")}
            rule_id = self.add_rule(parts[1], body["display_name"], **fields)
            return copy.deepcopy(self.rules[rule_id])
        raise AssertionError(f"Unexpected POST {path}")

    def put(self, path, body):
        self.calls.append(("PUT", path))
        parts = self._parts(path)
        if len(parts) == 4 and parts[2] == "rules":
            if self.before_write:
                self.before_write("PUT", parts)
            rule = self.rules.get(parts[3])
            if rule is None:
                raise IncorrectResponseCodeError("rule not found", status_code=404)
            if body.get("_revision") != rule["_revision"]:
                raise RevisionConflictError("stale rule revision", status_code=412)
            updated = {k: v for k, v in body.items() if k != "_revision"}
            updated.update(id=rule["id"], section_id=rule["section_id"], _revision=rule["_revision"] + 1)
            self.rules[rule["id"]] = updated
            return copy.deepcopy(updated)
        raise AssertionError(f"Unexpected PUT {path}")

    def delete(self, path, params=None):
        self.calls.append(("DELETE", path))
        parts = self._parts(path)
        if self.ignore_deletes:
            return None
        if len(parts) == 2 and parts[0] == "sections":
            self.sections.pop(parts[1], None)
            if params and params.get("cascade") == "true":
                for rule_id in [r["id"] for r in self.rules.values() if r["section_id"] == parts[1]]:
                    del self.rules[rule_id]
            return None
        if len(parts) == 4 and parts[2] == "rules":
            if self.rules.pop(parts[3], None) and parts[1] in self.sections:
                self.sections[parts[1]]["_revision"] += 1
            return None
        raise AssertionError(f"Unexpected DELETE {path}")


@pytest.fixture
def store():
    """Empty fake NSX manager."""
    return FakeNSXStore()


@pytest.fixture
def test_settings():
    """Settings with no backoff between conflict retries."""
    return Settings(CONFLICT_RETRY_BACKOFF=0, CONFLICT_RETRY_ATTEMPTS=3, DUPLICATE_NAME_POLICY="error")


@pytest.fixture
def section_repo(store):
    return SectionRepository(store)


@pytest.fixture
def managed_section_id(store):
    """Id of an existing managed section."""
    return store.add_section(SECTION_NAME)


@pytest.fixture
def rule_repo(store, managed_section_id):
    return RuleRepository(store, managed_section_id=managed_section_id, conflict_backoff=0)


@pytest.fixture
def firewall(store, test_settings):
    """Firewall handle bound to a freshly created managed section."""
    return DistributedFirewall.initialize(store, SECTION_NAME, config=test_settings)


@pytest.fixture(scope="function", autouse=True)
def disable_api_key():
    """Disable API key authentication for all tests."""
    with patch("nsx_dfw.core.config.settings.API_KEY", None):
        yield


@pytest.fixture(scope="function")
def client(firewall):
    """
    Create a test client with the firewall handle injected.

    The lifespan is not run (no `with TestClient(...)`), so no real NSX
    manager is contacted.
    """
    app.state.firewall = firewall
    yield TestClient(app)
    app.state.firewall = None
    app.state.nsx_client = None


@pytest.fixture(scope="function")
def client_with_auth(firewall):
    """
    Create a test client with API key authentication enabled.

    Sets API_KEY="test-key" for testing authentication.
    """
    app.state.firewall = firewall
    with patch("nsx_dfw.core.config.settings.API_KEY", "test-key"):
        yield TestClient(app)
    app.state.firewall = None
    app.state.nsx_client = None

from __future__ import annotations

import json

import pytest

from sasunitci.installation import (
    ConfigurationError,
    InstallationStore,
    check_batch_path,
    check_home,
    check_name,
    resolve_installation,
)
from sasunitci.model import Installation, NodeContext


@pytest.fixture
def store(tmp_path):
    s = InstallationStore(tmp_path / "installations.json")
    s.set_installations(Installation("v1", "/opt/su"), Installation("v2", "${TOOLS}/su2"))
    return s


def test_missing_file_is_empty_store(tmp_path):
    s = InstallationStore(tmp_path / "nope.json")
    assert s.installations == []
    assert not (tmp_path / "nope.json").exists()


def test_store_persists_and_reloads(store):
    store.set_tool_location("agent-1", "v1", "/srv/su")

    again = InstallationStore(store.path)

    assert again.installations == [Installation("v1", "/opt/su"), Installation("v2", "${TOOLS}/su2")]
    assert again.node("agent-1") == NodeContext("agent-1", {"v1": "/srv/su"})
    assert again.node("other").tool_locations == {}


def test_add_and_remove(store):
    store.add(Installation("v3", "/opt/su3"))
    assert store.get("v3") == Installation("v3", "/opt/su3")

    store.remove("v1")
    assert store.get("v1") is None
    assert [i.name for i in InstallationStore(store.path).installations] == ["v2", "v3"]


def test_duplicate_name_rejected(store):
    with pytest.raises(ConfigurationError):
        store.add(Installation("v1", "/elsewhere"))
    assert store.get("v1").home == "/opt/su"


def test_empty_name_rejected(store):
    with pytest.raises(ConfigurationError):
        store.add(Installation("  ", "/opt"))


def test_remove_unknown(store):
    with pytest.raises(ConfigurationError):
        store.remove("v9")


def test_tool_location_for_unknown_installation(store):
    with pytest.raises(ConfigurationError):
        store.set_tool_location("agent-1", "v9", "/x")


def test_invalid_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"installations": [{"name": "v1"}]}))
    with pytest.raises(ConfigurationError):
        InstallationStore(path)


def test_resolve_unknown_or_absent_name(store):
    node = NodeContext()
    assert resolve_installation(store, "v9", node, {}) is None
    assert resolve_installation(store, None, node, {}) is None


def test_resolve_translates_for_node_before_expanding(store):
    node = NodeContext("agent-1", {"v1": "$AGENT_TOOLS/su"})

    inst = resolve_installation(store, "v1", node, {"AGENT_TOOLS": "/agent/tools"})

    assert inst == Installation("v1", "/agent/tools/su")
    assert store.get("v1").home == "/opt/su"


def test_resolve_expands_environment(store):
    inst = resolve_installation(store, "v2", NodeContext(), {"TOOLS": "/tools"})
    assert inst.home == "/tools/su2"


def test_check_home(tmp_path):
    a_file = tmp_path / "file.txt"
    a_file.write_text("x")

    assert check_home("").kind == "ok"
    assert check_home(str(tmp_path)).kind == "ok"
    assert check_home(str(tmp_path / "missing")).kind == "warning"
    assert check_home(str(a_file)).kind == "error"


def test_check_name():
    assert check_name("v1").kind == "ok"
    assert check_name("").is_error
    assert check_name("   ").is_error


def test_check_batch_path():
    assert check_batch_path("").is_error
    assert check_batch_path("a.s").kind == "warning"
    assert check_batch_path("bin/run.sh").kind == "ok"


def test_non_utf8_file(tmp_path):
    path = tmp_path / "installations.json"
    path.write_bytes(b'{"installations":[{"name":"v\xff","home":"/opt"}]}')
    with pytest.raises(ConfigurationError):
        InstallationStore(path)


def test_remove_drops_tool_locations(store):
    store.set_tool_location("agent-1", "v1", "/srv/su")
    store.set_tool_location("agent-1", "v2", "/srv/su2")
    store.set_tool_location("agent-2", "v1", "/data/su")

    store.remove("v1")
    store.add(Installation("v1", "/opt/su-new"))

    again = InstallationStore(store.path)
    assert again.node("agent-1").tool_locations == {"v2": "/srv/su2"}
    assert again.node("agent-2").tool_locations == {}
    assert resolve_installation(again, "v1", again.node("agent-2"), {}).home == "/opt/su-new"

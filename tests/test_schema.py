"""
Tests for gnmidiff.schema: the in-memory SchemaTree binder.

    §1  Schema checks
    §2  Path resolution
    §3  Binding values
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnmidiff.errors import SchemaValidationError
from gnmidiff.gnmi import TypedValue
from gnmidiff.schema import (
    NodeKind, SchemaTree, container, yang_list, leaf, leaf_list, strip_module,
)
from gnmidiff.values import NString, NBool, NNumber, NList


def oc_schema() -> SchemaTree:
    return SchemaTree(container({
        "interfaces": container({
            "interface": yang_list(["name"], {
                "name": leaf("string"),
                "config": container({
                    "name": leaf("string"),
                    "description": leaf("string"),
                    "mtu": leaf("uint16"),
                    "enabled": leaf("boolean"),
                    "type": leaf("identityref"),
                }),
                "subinterfaces": container({
                    "subinterface": yang_list(["index"], {
                        "index": leaf("uint32"),
                        "config": container({"index": leaf("uint32")}),
                    }),
                }),
            }),
        }),
        "system": container({
            "config": container({
                "hostname": leaf("string"),
                "counter": leaf("uint64"),
                "ratio": leaf("decimal64"),
                "servers": leaf_list("string"),
            }),
        }),
    }))


# ═══════════════════════════════════════════════════════════════════
#  §1  SCHEMA CHECKS
# ═══════════════════════════════════════════════════════════════════

class TestSchemaChecks:

    def test_valid(self):
        s = oc_schema()
        assert s.is_valid()
        assert s.problems == []

    def test_list_without_keys(self):
        s = SchemaTree(container({"l": yang_list([], {"a": leaf()})}))
        assert not s.is_valid()

    def test_key_not_a_leaf(self):
        s = SchemaTree(container({"l": yang_list(["c"], {"c": container({})})}))
        assert not s.is_valid()

    def test_unknown_leaf_type(self):
        s = SchemaTree(container({"x": leaf("float128")}))
        assert not s.is_valid()

    def test_root_must_be_container(self):
        assert not SchemaTree(leaf()).is_valid()

    def test_strip_module(self):
        assert strip_module("openconfig-interfaces:interfaces") == "interfaces"
        assert strip_module("interfaces") == "interfaces"


# ═══════════════════════════════════════════════════════════════════
#  §2  PATH RESOLUTION
# ═══════════════════════════════════════════════════════════════════

class TestNodeKind:

    @pytest.mark.parametrize("path,kind", [
        ("", NodeKind.CONTAINER),
        ("/interfaces", NodeKind.CONTAINER),
        ("/interfaces/interface", NodeKind.LIST),
        ("/interfaces/interface[name=eth0]", NodeKind.LIST),
        ("/interfaces/interface[name=eth0]/config/mtu", NodeKind.LEAF),
        ("/system/config/servers", NodeKind.LEAF_LIST),
        ("/openconfig-system:system/config/hostname", NodeKind.LEAF),
    ])
    def test_kinds(self, path, kind):
        assert oc_schema().node_kind(path) == kind

    @pytest.mark.parametrize("path", [
        "/nope",
        "/interfaces/interface[index=0]",
        "/interfaces/interface/config",
        "/system[name=x]",
        "/system/config/hostname/deeper",
    ])
    def test_unresolvable(self, path):
        with pytest.raises(SchemaValidationError):
            oc_schema().node_kind(path)


# ═══════════════════════════════════════════════════════════════════
#  §3  BINDING VALUES
# ═══════════════════════════════════════════════════════════════════

class TestValidate:

    def test_leaf_scalar(self):
        got = oc_schema().validate("/system/config/hostname", TypedValue.of_string("r1"))
        assert got == {"/system/config/hostname": NString("r1")}

    def test_leaf_json(self):
        got = oc_schema().validate("/system/config/hostname", TypedValue.of_json_ietf("r1"))
        assert got == {"/system/config/hostname": NString("r1")}

    def test_uint64_string(self):
        got = oc_schema().validate("/system/config/counter", TypedValue.of_json_ietf("18446744073709551615"))
        assert got == {"/system/config/counter": NNumber(18446744073709551615)}

    def test_decimal64_string(self):
        got = oc_schema().validate("/system/config/ratio", TypedValue.of_json_ietf("0.25"))
        assert got == {"/system/config/ratio": NNumber(0.25)}

    def test_leaf_list(self):
        got = oc_schema().validate("/system/config/servers", TypedValue.of_json_ietf(["a", "b"]))
        assert got == {"/system/config/servers": NList((NString("a"), NString("b")))}

    def test_list_entry(self):
        tv = TypedValue.of_json_ietf({
            "name": "eth0",
            "config": {"name": "eth0", "mtu": 1500, "type": "iana-if-type:ethernetCsmacd"},
        })
        got = oc_schema().validate("/interfaces/interface[name=eth0]", tv)
        assert got == {
            "/interfaces/interface[name=eth0]/name": NString("eth0"),
            "/interfaces/interface[name=eth0]/config/name": NString("eth0"),
            "/interfaces/interface[name=eth0]/config/mtu": NNumber(1500),
            "/interfaces/interface[name=eth0]/config/type": NString("ethernetCsmacd"),
        }

    def test_whole_list_uses_schema_keys(self):
        """Only `index` is a key, even though `name` is also a scalar child."""
        s = SchemaTree(container({
            "l": yang_list(["index"], {"index": leaf("uint8"), "name": leaf()}),
        }))
        got = s.validate("/l", TypedValue.of_json_ietf([{"index": 1, "name": "a"}]))
        assert got == {"/l[index=1]/index": NNumber(1), "/l[index=1]/name": NString("a")}

    def test_module_prefixed_members(self):
        tv = TypedValue.of_json_ietf({"openconfig-system:config": {"hostname": "r1"}})
        got = oc_schema().validate("/system", tv)
        assert got == {"/system/config/hostname": NString("r1")}

    def test_container_from_root(self):
        tv = TypedValue.of_json_ietf({"system": {"config": {"hostname": "r1"}}})
        assert oc_schema().validate("", tv) == {"/system/config/hostname": NString("r1")}

    @pytest.mark.parametrize("path,value", [
        ("/system/config/hostname", 1),
        ("/interfaces/interface[name=eth0]/config/mtu", 70000),
        ("/interfaces/interface[name=eth0]/config/mtu", "abc"),
        ("/interfaces/interface[name=eth0]/config/mtu", 1.5),
        ("/interfaces/interface[name=eth0]/config/enabled", "true"),
        ("/system/config/servers", "a"),
        ("/system", {"config": {"bogus": 1}}),
        ("/interfaces/interface", [{"config": {"mtu": 1}}]),
        ("/interfaces/interface", {"name": "eth0"}),
    ])
    def test_rejected(self, path, value):
        with pytest.raises(SchemaValidationError):
            oc_schema().validate(path, TypedValue.of_json_ietf(value))

    def test_scalar_into_container(self):
        with pytest.raises(SchemaValidationError):
            oc_schema().validate("/system", TypedValue.of_string("x"))

    def test_bool_leaf(self):
        got = oc_schema().validate("/interfaces/interface[name=eth0]/config/enabled", TypedValue.of_bool(False))
        assert got == {"/interfaces/interface[name=eth0]/config/enabled": NBool(False)}

"""
Tests for gnmidiff.gnmiparse: textproto fixtures to messages.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnmidiff.errors import GnmiParseError, InvalidPath
from gnmidiff.gnmi import Decimal64, Path, PathElem, TypedValue
from gnmidiff.gnmiparse import (
    notifications_from_file, notifications_from_text, path_from_proto,
    set_request_from_file, set_request_from_text, split_by_empty_line,
    typed_value_from_proto,
)
from gnmidiff.paths import join_paths, path_to_string
from pygnmi.spec.v080 import gnmi_pb2

TESTDATA = os.path.join(os.path.dirname(os.path.abspath(__file__)), "testdata")


class TestSplitByEmptyLine:

    @pytest.mark.parametrize("text,expected", [
        ("foo\nbar\nbaz", ["foo\nbar\nbaz"]),
        ("foo\n\nbar\nbaz\n\n\nboo", ["foo", "bar\nbaz", "boo"]),
        ("\n\nfoo\n\n", ["foo"]),
        ("", []),
    ])
    def test_split(self, text, expected):
        assert split_by_empty_line(text) == expected


class TestProtoConversion:

    def test_path_elems(self):
        p = gnmi_pb2.Path(elem=[
            gnmi_pb2.PathElem(name="interfaces"),
            gnmi_pb2.PathElem(name="interface", key={"name": "eth0"}),
        ])
        assert path_from_proto(p) == Path((PathElem("interfaces"), PathElem("interface", {"name": "eth0"})))

    def test_legacy_element_path(self):
        p = gnmi_pb2.Path(element=["interfaces", "interface[name=eth0]", "config"])
        assert path_to_string(path_from_proto(p)) == "/interfaces/interface[name=eth0]/config"

    def test_legacy_element_bad(self):
        with pytest.raises(InvalidPath):
            path_from_proto(gnmi_pb2.Path(element=["interface[=eth0]"]))

    @pytest.mark.parametrize("pb,expected", [
        (gnmi_pb2.TypedValue(string_val="x"), TypedValue.of_string("x")),
        (gnmi_pb2.TypedValue(uint_val=7), TypedValue.of_uint(7)),
        (gnmi_pb2.TypedValue(bool_val=True), TypedValue.of_bool(True)),
        (gnmi_pb2.TypedValue(json_ietf_val=b'{"a": 1}'), TypedValue("json_ietf_val", b'{"a": 1}')),
        (gnmi_pb2.TypedValue(decimal_val=gnmi_pb2.Decimal64(digits=125, precision=2)),
         TypedValue("decimal_val", Decimal64(125, 2))),
    ])
    def test_typed_values(self, pb, expected):
        assert typed_value_from_proto(pb) == expected

    def test_leaf_list(self):
        pb = gnmi_pb2.TypedValue(leaflist_val=gnmi_pb2.ScalarArray(element=[
            gnmi_pb2.TypedValue(string_val="a"), gnmi_pb2.TypedValue(int_val=-1),
        ]))
        assert typed_value_from_proto(pb) == TypedValue.of_leaf_list(
            TypedValue.of_string("a"), TypedValue.of_int(-1))

    def test_unset_value(self):
        assert typed_value_from_proto(gnmi_pb2.TypedValue()) is None

    def test_leaf_list_element_without_value(self):
        pb = gnmi_pb2.TypedValue(leaflist_val=gnmi_pb2.ScalarArray(element=[gnmi_pb2.TypedValue()]))
        with pytest.raises(GnmiParseError, match="leaf-list element"):
            typed_value_from_proto(pb)


class TestSetRequestParsing:

    def test_from_file(self):
        req = set_request_from_file(os.path.join(TESTDATA, "setrequest_a.textproto"))
        assert req.prefix.origin == "openconfig"
        assert len(req.replace) == 2
        assert path_to_string(req.replace[0].path) == "/interfaces/interface[name=eth0]"
        assert req.replace[0].val.kind == "json_ietf_val"

    def test_deletes(self):
        req = set_request_from_file(os.path.join(TESTDATA, "setrequest_b.textproto"))
        assert [join_paths(req.prefix, p) for p in req.delete] == ["/interfaces/interface[name=eth0]"]
        assert req.prefix is None

    def test_invalid(self):
        with pytest.raises(GnmiParseError):
            set_request_from_text("replace { bogus: 1 }")

    def test_empty_leaf_list_element(self):
        text = 'update { path { elem { name: "a" } } val { leaflist_val { element { } } } }'
        with pytest.raises(GnmiParseError):
            set_request_from_text(text)


class TestNotificationParsing:

    def test_subscribe_responses(self):
        notifs = notifications_from_file(os.path.join(TESTDATA, "notifs.textproto"))
        assert [n.timestamp for n in notifs] == [1, 2, 3]
        assert sum(len(n.update) for n in notifs) == 6

    def test_get_response(self):
        notifs = notifications_from_file(os.path.join(TESTDATA, "getresponse.textproto"))
        assert len(notifs) == 2
        assert path_to_string(notifs[0].prefix) == "/interfaces/interface[name=eth0]"

    def test_mixed_blocks_accumulate(self):
        text = (
            'notification { timestamp: 1 }\n'
            '\n'
            'update { timestamp: 2 }\n'
            '\n'
            'notification { timestamp: 3 }\nnotification { timestamp: 4 }\n'
        )
        assert [n.timestamp for n in notifications_from_text(text)] == [1, 2, 3, 4]

    def test_invalid_block(self):
        with pytest.raises(GnmiParseError, match="Notification/SubscribeResponse"):
            notifications_from_text("not a proto at all")

    def test_missing_file(self):
        with pytest.raises(OSError):
            notifications_from_file(os.path.join(TESTDATA, "does-not-exist.textproto"))

"""
Tests for gnmidiff.formatting: the text rendering of diffs.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnmidiff.diff import DeleteDiff, MismatchedUpdate, SetToNotifsDiff, StructuredDiff, UpdateDiff
from gnmidiff.formatting import Format, format_value
from gnmidiff.values import NString, NBool, NNumber, NList


ETH0 = "/interfaces/interface[name=eth0]"
SUB0 = ETH0 + "/subinterfaces/subinterface[index=0]"


@pytest.fixture
def sample_diff() -> StructuredDiff:
    return StructuredDiff(
        deletes=DeleteDiff(
            missing_deletes=frozenset({"/interfaces/interface[name=eth1]"}),
            extra_deletes=frozenset({"/interfaces/interface[name=eth2]"}),
            common_deletes=frozenset({ETH0}),
        ),
        updates=UpdateDiff(
            missing_updates={
                "/interfaces/interface[name=eth1]/name": NString("eth1"),
                "/interfaces/interface[name=eth1]/config/name": NString("eth1"),
            },
            extra_updates={
                "/interfaces/interface[name=eth2]/name": NString("eth2"),
                "/interfaces/interface[name=eth2]/config/name": NString("eth2"),
                ETH0 + "/state/transceiver": NString("FDM"),
            },
            common_updates={
                ETH0 + "/name": NString("eth0"),
                ETH0 + "/config/name": NString("eth0"),
                ETH0 + "/config/description": NString("I am an eth port"),
                SUB0 + "/config/index": NNumber(0),
                SUB0 + "/index": NNumber(0),
                SUB0 + "/state/oper-status": NString("TESTING"),
                SUB0 + "/config/enabled": NBool(True),
                "/interfaces/interface[name=eth2]/state/transceiver": NString("FDM"),
            },
            mismatched_updates={
                SUB0 + "/state/logical": MismatchedUpdate(NBool(False), NBool(True)),
                SUB0 + "/state/name": MismatchedUpdate(NString("foo"), NString("bar")),
            },
        ),
    )


COMPACT = """\
StructuredDiff(-A, +B):
-------- deletes --------
- /interfaces/interface[name=eth1]: deleted
+ /interfaces/interface[name=eth2]: deleted
-------- updates --------
- /interfaces/interface[name=eth1]/config/name: "eth1"
- /interfaces/interface[name=eth1]/name: "eth1"
+ /interfaces/interface[name=eth0]/state/transceiver: "FDM"
+ /interfaces/interface[name=eth2]/config/name: "eth2"
+ /interfaces/interface[name=eth2]/name: "eth2"
m /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/state/logical:
  - false
  + true
m /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/state/name:
  - "foo"
  + "bar"
"""

FULL = """\
StructuredDiff(-A, +B):
-------- deletes --------
  /interfaces/interface[name=eth0]: deleted
- /interfaces/interface[name=eth1]: deleted
+ /interfaces/interface[name=eth2]: deleted
-------- updates --------
  /interfaces/interface[name=eth0]/config/description: "I am an eth port"
  /interfaces/interface[name=eth0]/config/name: "eth0"
  /interfaces/interface[name=eth0]/name: "eth0"
  /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/config/enabled: true
  /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/config/index: 0
  /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/index: 0
  /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/state/oper-status: "TESTING"
  /interfaces/interface[name=eth2]/state/transceiver: "FDM"
- /interfaces/interface[name=eth1]/config/name: "eth1"
- /interfaces/interface[name=eth1]/name: "eth1"
+ /interfaces/interface[name=eth0]/state/transceiver: "FDM"
+ /interfaces/interface[name=eth2]/config/name: "eth2"
+ /interfaces/interface[name=eth2]/name: "eth2"
m /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/state/logical:
  - false
  + true
m /interfaces/interface[name=eth0]/subinterfaces/subinterface[index=0]/state/name:
  - "foo"
  + "bar"
"""


class TestStructuredDiffFormat:

    def test_compact(self, sample_diff):
        assert sample_diff.format() == COMPACT

    def test_full(self, sample_diff):
        assert sample_diff.format(Format(full=True)) == FULL

    def test_custom_names(self, sample_diff):
        out = sample_diff.format(Format(title="Diff", a_name="old", b_name="new"))
        assert out.startswith("Diff(-old, +new):\n")

    def test_no_deletes_block_when_empty(self):
        diff = StructuredDiff(updates=UpdateDiff(missing_updates={"/a": NNumber(1.5)}))
        assert diff.format() == "StructuredDiff(-A, +B):\n- /a: 1.5\n"

    def test_common_deletes_hidden_unless_full(self):
        diff = StructuredDiff(deletes=DeleteDiff(common_deletes=frozenset({"/a"})))
        assert diff.format() == "StructuredDiff(-A, +B):\n"
        assert "-------- deletes --------" in diff.format(Format(full=True))

    def test_empty(self):
        assert StructuredDiff().format() == "StructuredDiff(-A, +B):\n"


class TestSetToNotifsFormat:

    def test_header_and_body(self):
        diff = SetToNotifsDiff(
            extra_updates={ETH0 + "/config/description": NString("text")},
            common_updates={ETH0 + "/name": NString("eth0")},
        )
        assert diff.format() == (
            "SetToNotifsDiff(-want/SetRequest, +got/Notifications):\n"
            '+ /interfaces/interface[name=eth0]/config/description: "text"\n'
        )
        assert diff.format(Format(full=True)) == (
            "SetToNotifsDiff(-want/SetRequest, +got/Notifications):\n"
            '  /interfaces/interface[name=eth0]/name: "eth0"\n'
            '+ /interfaces/interface[name=eth0]/config/description: "text"\n'
        )


class TestFormatValue:

    @pytest.mark.parametrize("val,expected", [
        (NString("eth0"), '"eth0"'),
        (NString('a"b'), '"a\\"b"'),
        (NNumber(1500), "1500"),
        (NNumber(0.5), "0.5"),
        (NBool(False), "false"),
        (NList((NString("a"), NString("b"))), "[a b]"),
    ])
    def test_values(self, val, expected):
        assert format_value(val) == expected

"""
Benchmark: gnmidiff intent building and diffing at scale.

Measures, for growing numbers of interfaces:
    1. flattening a whole-tree RFC7951 JSON replace
    2. building the intent (including the prefix conflict checks)
    3. diffing the intent against Notifications that report extra state

The prefix checks run over a sorted index, so cost should grow roughly
as n log n in the number of leaves rather than n².
"""

import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gnmidiff.diff import diff_intent_to_notifications
from gnmidiff.flatten import flatten_json
from gnmidiff.gnmi import Notification, SetRequest, TypedValue, Update
from gnmidiff.intent import notification_updates, set_request_intent
from gnmidiff.paths import string_to_path


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

def interfaces_tree(n: int, with_state: bool = False) -> dict:
    entries = []
    for i in range(n):
        name = f"eth{i}"
        entry = {
            "name": name,
            "config": {"name": name, "mtu": 1500 + i % 3, "enabled": i % 2 == 0,
                       "description": f"port {i}"},
            "subinterfaces": {"subinterface": [
                {"index": j, "config": {"index": j, "enabled": True}} for j in range(4)
            ]},
        }
        if with_state:
            entry["state"] = {"name": name, "oper-status": "UP", "counters": {"in-pkts": i * 1000}}
        entries.append(entry)
    return {"interface": entries}


def _time(fn, *args):
    t0 = time.perf_counter()
    result = fn(*args)
    return result, time.perf_counter() - t0


# ═══════════════════════════════════════════════════════════════════
#  BENCHMARKS
# ═══════════════════════════════════════════════════════════════════

def benchmark_flatten():
    print("=" * 70)
    print("  §1  FLATTEN")
    print("=" * 70)
    print()
    for n in [10, 100, 1000]:
        leaves, dt = _time(flatten_json, interfaces_tree(n), "/interfaces")
        print(f"  interfaces {n:>5}: leaves={len(leaves):>7}  time={dt*1000:>8.2f}ms")
    print()


def benchmark_intent():
    print("=" * 70)
    print("  §2  INTENT BUILDING")
    print("=" * 70)
    print()
    for n in [10, 100, 1000]:
        tree = interfaces_tree(n)
        replaces = [
            Update(string_to_path(f"/interfaces/interface[name={e['name']}]"), TypedValue.of_json_ietf(e))
            for e in tree["interface"]
        ]
        intent, dt = _time(set_request_intent, SetRequest(replace=replaces))
        print(f"  replaces   {n:>5}: deletes={len(intent.deletes):>5}  "
              f"updates={len(intent.updates):>7}  time={dt*1000:>8.2f}ms")
    print()


def benchmark_set_to_notifs():
    print("=" * 70)
    print("  §3  SETREQUEST VS NOTIFICATIONS")
    print("=" * 70)
    print()
    for n in [10, 100, 1000]:
        setreq = SetRequest(replace=[
            Update(string_to_path("/interfaces"), TypedValue.of_json_ietf(interfaces_tree(n))),
        ])
        notifs = [Notification(update=[
            Update(string_to_path("/interfaces"), TypedValue.of_json_ietf(interfaces_tree(n, with_state=True))),
        ])]
        intent = set_request_intent(setreq)
        observed = notification_updates(notifs)
        diff, dt = _time(diff_intent_to_notifications, intent, observed)
        print(f"  interfaces {n:>5}: common={len(diff.common_updates):>7}  "
              f"extra={len(diff.extra_updates):>6}  time={dt*1000:>8.2f}ms")
    print()


def main():
    print()
    print("╔══════════════════════════════════════════════════════════════════════╗")
    print("║          GNMIDIFF — BENCHMARK SUITE                                 ║")
    print("╚══════════════════════════════════════════════════════════════════════╝")
    print()

    benchmark_flatten()
    benchmark_intent()
    benchmark_set_to_notifs()


if __name__ == "__main__":
    main()

"""
gnmidiff.diff — Diff engine
===========================

Compares intents leaf by leaf.

    diff_intents(a, b)                         Intent vs Intent
    diff_intent_to_notifications(i, updates)   Intent vs observed leaves
    diff_set_requests(a, b)                    SetRequest vs SetRequest
    diff_set_request_to_notifications(s, ns)   SetRequest vs Notifications
    diff_notifications(a, b)                   Notifications vs Notifications

Every path of A lands in exactly one of missing / common / mismatched;
every remaining path of B is extra.  Values are compared structurally, so
reordering a leaf-list is a mismatch.

AGAINST NOTIFICATIONS
─────────────────────
A device reports far more than any SetRequest mentions.  Observed leaves
the SetRequest has no opinion on are dropped, except those lying under a
path the SetRequest deletes or replaces: those should be gone, so they are
reported as extra.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .errors import GnmiDiffError
from .formatting import Format, render
from .gnmi import Notification, SetRequest
from .intent import Intent, notification_updates, set_request_intent
from .paths import PrefixIndex
from .schema import SchemaBinder
from .values import NVal


@dataclass(frozen=True)
class MismatchedUpdate:
    a: NVal
    b: NVal


@dataclass(frozen=True)
class DeleteDiff:
    missing_deletes: frozenset[str] = frozenset()
    extra_deletes: frozenset[str] = frozenset()
    common_deletes: frozenset[str] = frozenset()


@dataclass(frozen=True)
class UpdateDiff:
    missing_updates: Mapping[str, NVal] = field(default_factory=dict)     # in A only (-)
    extra_updates: Mapping[str, NVal] = field(default_factory=dict)       # in B only (+)
    common_updates: Mapping[str, NVal] = field(default_factory=dict)
    mismatched_updates: Mapping[str, MismatchedUpdate] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.missing_updates or self.extra_updates or self.mismatched_updates)


@dataclass(frozen=True)
class StructuredDiff:
    deletes: DeleteDiff = field(default_factory=DeleteDiff)
    updates: UpdateDiff = field(default_factory=UpdateDiff)

    def is_empty(self) -> bool:
        d = self.deletes
        return self.updates.is_empty() and not (d.missing_deletes or d.extra_deletes)

    def format(self, fmt: Optional[Format] = None) -> str:
        return render(self.deletes, self.updates, fmt or Format())


@dataclass(frozen=True)
class SetToNotifsDiff(UpdateDiff):
    """UpdateDiff of a SetRequest (A, wanted) against Notifications (B, got)."""

    def format(self, fmt: Optional[Format] = None) -> str:
        fmt = Format(full=fmt.full if fmt else False, title="SetToNotifsDiff",
                     a_name="want/SetRequest", b_name="got/Notifications")
        return render(None, self, fmt)


# ═══════════════════════════════════════════════════════════════════
#  CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════

def _classify(a: Mapping[str, NVal], remaining_b: dict[str, NVal]):
    """
    Split A's leaves into missing / common / mismatched against B.

    Matched paths are removed from `remaining_b`, which must be a copy the
    caller owns.
    """
    missing: dict[str, NVal] = {}
    common: dict[str, NVal] = {}
    mismatched: dict[str, MismatchedUpdate] = {}
    for path, va in a.items():
        if path not in remaining_b:
            missing[path] = va
            continue
        vb = remaining_b.pop(path)
        if va == vb:
            common[path] = va
        else:
            mismatched[path] = MismatchedUpdate(va, vb)
    return missing, common, mismatched


def diff_updates(a: Mapping[str, NVal], b: Mapping[str, NVal]) -> UpdateDiff:
    remaining = dict(b)
    missing, common, mismatched = _classify(a, remaining)
    return UpdateDiff(missing, remaining, common, mismatched)


def diff_intents(a: Intent, b: Intent) -> StructuredDiff:
    deletes = DeleteDiff(
        missing_deletes=a.deletes - b.deletes,
        extra_deletes=b.deletes - a.deletes,
        common_deletes=a.deletes & b.deletes,
    )
    return StructuredDiff(deletes, diff_updates(a.updates, b.updates))


def diff_intent_to_notifications(intent: Intent,
                                 notif_updates: Mapping[str, NVal]) -> SetToNotifsDiff:
    remaining = dict(notif_updates)
    missing, common, mismatched = _classify(intent.updates, remaining)

    index = PrefixIndex(remaining)
    extra: dict[str, NVal] = {}
    for del_path in intent.deletes:
        for path in index.descendants(del_path):
            extra[path] = remaining[path]
    return SetToNotifsDiff(missing, extra, common, mismatched)


# ═══════════════════════════════════════════════════════════════════
#  MESSAGE-LEVEL ENTRY POINTS
# ═══════════════════════════════════════════════════════════════════

def _intent_on(side: str, req: Optional[SetRequest], schema: Optional[SchemaBinder]) -> Intent:
    try:
        return set_request_intent(req, schema)
    except GnmiDiffError as e:
        raise type(e)(f"on {side}: {e}") from e


def diff_set_requests(a: Optional[SetRequest], b: Optional[SetRequest],
                      schema: Optional[SchemaBinder] = None) -> StructuredDiff:
    """Diff the intents of two SetRequests."""
    return diff_intents(_intent_on("a", a, schema), _intent_on("b", b, schema))


def diff_set_request_to_notifications(setreq: Optional[SetRequest],
                                      notifs: Sequence[Notification],
                                      schema: Optional[SchemaBinder] = None) -> SetToNotifsDiff:
    """
    Check whether Notifications reflect what a SetRequest asked for.

    Notifications are flattened with later values winning; deletes inside
    notifications raise UnsupportedDelete.
    """
    intent = set_request_intent(setreq, schema)
    return diff_intent_to_notifications(intent, notification_updates(notifs, schema))


def diff_notifications(a: Sequence[Notification], b: Sequence[Notification]) -> StructuredDiff:
    return StructuredDiff(updates=diff_updates(notification_updates(a), notification_updates(b)))

"""
gnmidiff.intent — The minimal intent of a SetRequest
=====================================================

A SetRequest mixes three kinds of operations, applied in field order:

    delete   remove a subtree
    replace  remove a subtree, then write the given value under it
    update   write the given value, leaving everything else in place

Two requests can be written very differently and still mean the same
thing.  Their common denominator is an Intent:

    Intent.deletes   set of LeafPaths whose subtrees are removed
    Intent.updates   {LeafPath: NVal}, one entry per leaf written

A replace therefore contributes both a delete (of its path) and leaf
updates (of its value).  A leaf replace is the same as a leaf update, so it
leaves no delete behind.

CONFLICTS
─────────
Requests whose effect depends on how the target applies overlapping
operations are rejected rather than guessed at:

    ConflictingDelete    the same path deleted twice
    ConflictingReplace   a path both deleted and replaced, or two
                         deletes/replaces where one is inside the other
    BadSetRequest        one leaf set to two different values, or a leaf
                         update that is an ancestor of another leaf update

The builder is all-or-nothing: any conflict raises and no intent is
returned.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from .errors import (
    BadSetRequest, ConflictingDelete, ConflictingReplace, InvalidPath,
    SchemaInvalid, UnsupportedDelete,
)
from .flatten import flatten_json_bytes
from .gnmi import Notification, SetRequest, TypedValue
from .paths import PrefixIndex, is_within, join_paths
from .schema import SchemaBinder
from .values import NVal, from_typed_value


@dataclass(frozen=True)
class Intent:
    """Immutable (deletes, updates) summary of one SetRequest."""
    deletes: frozenset[str] = frozenset()
    updates: Mapping[str, NVal] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "deletes", frozenset(self.deletes))
        object.__setattr__(self, "updates", MappingProxyType(dict(self.updates)))

    def __eq__(self, other):
        if not isinstance(other, Intent):
            return NotImplemented
        return self.deletes == other.deletes and dict(self.updates) == dict(other.updates)

    def __hash__(self):
        return hash((self.deletes, frozenset(self.updates.items())))

    def __repr__(self) -> str:
        return f"Intent(deletes={len(self.deletes)}, updates={len(self.updates)})"


# ═══════════════════════════════════════════════════════════════════
#  INTENT BUILDER
# ═══════════════════════════════════════════════════════════════════

class IntentBuilder:
    """
    Accumulates deletes, replaces and updates into an Intent.

    Operations must be fed in SetRequest order (all deletes, then all
    replaces, then all updates) for error reporting to be deterministic;
    `build_intent` does exactly that.
    """

    def __init__(self, schema: Optional[SchemaBinder] = None):
        self.schema = schema
        self.deletes: set[str] = set()
        self.updates: dict[str, NVal] = {}
        # Every delete and replace path ever claimed, including leaf
        # replaces whose delete marker was dropped.
        self._claimed = PrefixIndex()

    # ── operations ──────────────────────────────────────────────────

    def delete(self, path: str) -> None:
        if path in self.deletes:
            raise ConflictingDelete(f"conflicting deletes in SetRequest: {path}")
        self.deletes.add(path)
        self._claimed.add(path)

    def replace(self, path: str, tv: TypedValue) -> None:
        if path in self.deletes or path in self._claimed:
            raise ConflictingReplace(f"conflicting replaces in SetRequest: {path}")
        self.deletes.add(path)
        self._claimed.add(path)
        self.populate_update(path, tv, error_on_overwrite=True)

    def check_replaces(self) -> None:
        """Reject delete/replace paths nested inside one another."""
        for path in self._claimed:
            nested = self._claimed.descendants(path)
            if nested:
                raise ConflictingReplace(
                    f"conflicting replaces in SetRequest: {path} contains {nested}")

    def update(self, path: str, tv: TypedValue) -> None:
        self.populate_update(path, tv, error_on_overwrite=True)

    def check_updates(self) -> None:
        """Reject leaf updates that are ancestors of other leaf updates."""
        index = PrefixIndex(self.updates)
        for path in index:
            nested = index.descendants(path)
            if nested:
                raise BadSetRequest(
                    f"bad SetRequest, there are leaf updates that have a prefix match: {[path] + nested}")

    def build(self) -> Intent:
        return Intent(frozenset(self.deletes), dict(self.updates))

    # ── leaf population ─────────────────────────────────────────────

    def write_update(self, path: str, val: NVal, error_on_overwrite: bool) -> None:
        prev = self.updates.get(path)
        if error_on_overwrite and prev is not None and prev != val:
            raise BadSetRequest(
                f"leaf value set twice with different values in SetRequest: {path}")
        self.updates[path] = val

    def populate_update(self, path: str, tv: TypedValue, error_on_overwrite: bool) -> None:
        """
        Write every leaf carried by `tv` at `path` into the intent.

        If the value turns out to be a single leaf, any delete marker for
        exactly that path is dropped: a leaf replace is a leaf update.
        """
        if path.endswith("/"):
            raise InvalidPath(f"invalid input path {path!r}, must not end with '/'")
        if tv is None:
            raise InvalidPath(f"update at {path!r} carries no value")
        if self.schema is not None:
            self._populate_with_schema(path, tv, error_on_overwrite)
            return

        if tv.is_json:
            leaves = flatten_json_bytes(tv.value)
            if set(leaves) == {""}:
                leaf_val = leaves[""]
            else:
                for subpath, val in leaves.items():
                    self.write_update(path + subpath, val, error_on_overwrite)
                return
        else:
            leaf_val = from_typed_value(tv)

        self.deletes.discard(path)
        self.write_update(path, leaf_val, error_on_overwrite)

    def _populate_with_schema(self, path: str, tv: TypedValue, error_on_overwrite: bool) -> None:
        if not self.schema.is_valid():
            raise SchemaInvalid(f"input schema is not valid: {self.schema!r}")
        if self.schema.node_kind(path).is_leaf:
            self.deletes.discard(path)
        for leaf_path, val in self.schema.validate(path, tv).items():
            if not (is_within(leaf_path, path) or leaf_path.startswith(path + "[")):
                # A list key created while binding an ancestor.
                continue
            self.write_update(leaf_path, val, error_on_overwrite)


def build_intent(
    deletes: Iterable[str] = (),
    replaces: Iterable[tuple[str, TypedValue]] = (),
    updates: Iterable[tuple[str, TypedValue]] = (),
    schema: Optional[SchemaBinder] = None,
) -> Intent:
    """
    Build the minimal Intent of a sequence of deletes, replaces and updates.

    Paths are LeafPath strings; values are TypedValues.  Processing order
    follows the SetRequest: deletes, replaces, the delete/replace overlap
    check, updates, and finally the leaf-update overlap check.
    """
    b = IntentBuilder(schema)
    for path in deletes:
        b.delete(path)
    for path, tv in replaces:
        b.replace(path, tv)
    b.check_replaces()
    for path, tv in updates:
        b.update(path, tv)
    b.check_updates()
    return b.build()


# ═══════════════════════════════════════════════════════════════════
#  MESSAGE ADAPTERS
# ═══════════════════════════════════════════════════════════════════

def set_request_intent(req: Optional[SetRequest], schema: Optional[SchemaBinder] = None) -> Intent:
    """Intent of a SetRequest, with its prefix applied to every path."""
    if req is None:
        req = SetRequest()
    return build_intent(
        deletes=[join_paths(req.prefix, p) for p in req.delete],
        replaces=[(join_paths(req.prefix, u.path), u.val) for u in req.replace],
        updates=[(join_paths(req.prefix, u.path), u.val) for u in req.update],
        schema=schema,
    )


def notification_updates(notifs: Sequence[Notification],
                         schema: Optional[SchemaBinder] = None) -> dict[str, NVal]:
    """
    Flatten the updates of a sequence of Notifications.

    Later values overwrite earlier ones, as they would on a subscriber.
    Deletes inside notifications are not supported.
    """
    b = IntentBuilder(schema)
    for notif in notifs:
        if notif.delete:
            raise UnsupportedDelete("deletes in notifications are not currently supported")
        for upd in notif.update:
            b.populate_update(join_paths(notif.prefix, upd.path), upd.val, error_on_overwrite=False)
    return b.updates

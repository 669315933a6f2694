"""
gnmidiff.schema — Schema-aware flattening
=========================================

Schema-agnostic flattening has to guess list keys from the JSON shape.
When a schema is available the guess is unnecessary: the schema knows
which nodes are lists, what their keys are, and what type every leaf has.

The intent builder depends only on the narrow `SchemaBinder` contract:

    binder.is_valid()            → is the schema itself well formed?
    binder.node_kind(path)       → LEAF / LEAF_LIST / CONTAINER / LIST
    binder.validate(path, tv)    → {LeafPath: NVal} for the value at path

Any schema layer (a YANG compiler, generated bindings, a lookup table)
can sit behind it.  `SchemaTree` is a small in-memory implementation
declared with `container`, `yang_list`, `leaf` and `leaf_list`:

    SchemaTree(container({
        "interfaces": container({
            "interface": yang_list(["name"], {
                "name": leaf("string"),
                "config": container({"name": leaf("string"),
                                     "mtu": leaf("uint16")}),
            }),
        }),
    }))

Compared to the schema-agnostic flattener, `SchemaTree`:
    • takes list keys from the schema
    • drops RFC7951 module prefixes from member names and from
      enumeration/identityref values
    • turns int64/uint64/decimal64 strings into numbers
    • rejects unknown members and ill-typed values
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Mapping, Optional, Sequence

from .errors import SchemaValidationError
from .flatten import decode_json
from .gnmi import TypedValue
from .paths import split_elements, parse_elem
from .values import NBool, NList, NNumber, NString, NVal, from_json, from_typed_value, is_json_scalar


class NodeKind(Enum):
    CONTAINER = auto()
    LIST = auto()
    LEAF = auto()
    LEAF_LIST = auto()

    @property
    def is_leaf(self) -> bool:
        return self in (NodeKind.LEAF, NodeKind.LEAF_LIST)


class SchemaBinder(ABC):
    """Contract between the intent builder and a schema layer."""

    def is_valid(self) -> bool:
        return True

    @abstractmethod
    def node_kind(self, path: str) -> NodeKind:
        """Kind of the schema node addressed by `path`."""

    @abstractmethod
    def validate(self, path: str, tv: TypedValue) -> dict[str, NVal]:
        """
        Bind `tv` at `path` and return the resulting leaves.

        Returned paths are absolute.  They may include leaves outside the
        subtree at `path` (e.g. list keys created along the way); the
        caller discards those.
        """


# ═══════════════════════════════════════════════════════════════════
#  SCHEMA DECLARATION
# ═══════════════════════════════════════════════════════════════════

INT_RANGES = {
    "int8": (-2**7, 2**7 - 1),
    "int16": (-2**15, 2**15 - 1),
    "int32": (-2**31, 2**31 - 1),
    "int64": (-2**63, 2**63 - 1),
    "uint8": (0, 2**8 - 1),
    "uint16": (0, 2**16 - 1),
    "uint32": (0, 2**32 - 1),
    "uint64": (0, 2**64 - 1),
}

LEAF_TYPES = frozenset(INT_RANGES) | {
    "string", "boolean", "decimal64", "enumeration", "identityref",
    "binary", "union",
}


@dataclass(frozen=True)
class SchemaNode:
    kind: NodeKind
    children: Mapping[str, "SchemaNode"] = field(default_factory=dict)
    keys: tuple[str, ...] = ()
    type: Optional[str] = None


def container(children: Mapping[str, SchemaNode]) -> SchemaNode:
    return SchemaNode(NodeKind.CONTAINER, dict(children))


def yang_list(keys: Sequence[str], children: Mapping[str, SchemaNode]) -> SchemaNode:
    return SchemaNode(NodeKind.LIST, dict(children), tuple(keys))


def leaf(type: str = "string") -> SchemaNode:
    return SchemaNode(NodeKind.LEAF, type=type)


def leaf_list(type: str = "string") -> SchemaNode:
    return SchemaNode(NodeKind.LEAF_LIST, type=type)


def strip_module(name: str) -> str:
    """'openconfig-interfaces:interfaces' → 'interfaces'."""
    return name.split(":", 1)[1] if ":" in name else name


# ═══════════════════════════════════════════════════════════════════
#  IN-MEMORY BINDER
# ═══════════════════════════════════════════════════════════════════

class SchemaTree(SchemaBinder):

    def __init__(self, root: SchemaNode):
        self.root = root
        self.problems: list[str] = []
        if root.kind != NodeKind.CONTAINER:
            self.problems.append(f"schema root must be a container, got {root.kind.name}")
        self._check(root, "")

    def _check(self, node: SchemaNode, path: str) -> None:
        if node.kind.is_leaf:
            if node.type not in LEAF_TYPES:
                self.problems.append(f"{path or '/'}: unknown leaf type {node.type!r}")
            return
        if node.kind == NodeKind.LIST:
            if not node.keys:
                self.problems.append(f"{path}: list has no keys")
            for k in node.keys:
                child = node.children.get(k)
                if child is None or child.kind != NodeKind.LEAF:
                    self.problems.append(f"{path}: list key {k!r} is not a leaf child")
        for name, child in node.children.items():
            self._check(child, f"{path}/{name}")

    def is_valid(self) -> bool:
        return not self.problems

    # ── path resolution ─────────────────────────────────────────────

    def _resolve(self, path: str) -> SchemaNode:
        node = self.root
        elems = [parse_elem(s) for s in split_elements(path)]
        for i, e in enumerate(elems):
            child = node.children.get(strip_module(e.name))
            if child is None or node.kind.is_leaf:
                raise SchemaValidationError(f"no schema node for {e.name!r} in path {path!r}")
            if child.kind == NodeKind.LIST:
                if e.key:
                    if set(e.key) != set(child.keys):
                        raise SchemaValidationError(
                            f"path {path!r}: keys {sorted(e.key)} do not match list keys {sorted(child.keys)}")
                elif i != len(elems) - 1:
                    raise SchemaValidationError(f"path {path!r}: list {e.name!r} is missing its keys")
            elif e.key:
                raise SchemaValidationError(f"path {path!r}: {e.name!r} is not a list")
            node = child
        return node

    def node_kind(self, path: str) -> NodeKind:
        return self._resolve(path).kind

    # ── binding ─────────────────────────────────────────────────────

    def validate(self, path: str, tv: TypedValue) -> dict[str, NVal]:
        node = self._resolve(path)
        leaves: dict[str, NVal] = {}

        if node.kind.is_leaf:
            raw = decode_json(tv.value) if tv.is_json else from_typed_value(tv).to_python()
            leaves[path] = self._leaf_or_leaf_list(node, raw, path)
            return leaves

        if not tv.is_json:
            raise SchemaValidationError(f"{tv.kind} value cannot be bound to non-leaf node {path!r}")
        obj = decode_json(tv.value)
        last = split_elements(path)[-1] if path else ""
        if node.kind == NodeKind.LIST and "[" not in last:
            self._walk_list(node, obj, path, leaves)
        else:
            self._walk_container(node, obj, path, leaves)
        return leaves

    def _walk_container(self, node: SchemaNode, obj: Any, path: str,
                        leaves: dict[str, NVal]) -> None:
        if not isinstance(obj, dict):
            raise SchemaValidationError(f"{path or '/'}: expected a JSON object, got {obj!r}")
        for member, child_obj in obj.items():
            name = strip_module(member)
            child = node.children.get(name)
            if child is None:
                raise SchemaValidationError(f"{path or '/'}: unknown member {member!r}")
            child_path = f"{path}/{name}"
            if child.kind.is_leaf:
                val = self._leaf_or_leaf_list(child, child_obj, child_path)
                if leaves.get(child_path, val) != val:
                    raise SchemaValidationError(
                        f"{child_path}: set twice with different values: {leaves[child_path]} and {val}")
                leaves[child_path] = val
            elif child.kind == NodeKind.LIST:
                self._walk_list(child, child_obj, child_path, leaves)
            else:
                self._walk_container(child, child_obj, child_path, leaves)

    def _walk_list(self, node: SchemaNode, entries: Any, path: str,
                   leaves: dict[str, NVal]) -> None:
        if not isinstance(entries, list):
            raise SchemaValidationError(f"{path}: expected a JSON array for list, got {entries!r}")
        for entry in entries:
            if not isinstance(entry, dict):
                raise SchemaValidationError(f"{path}: list entry is not an object: {entry!r}")
            members = {strip_module(k): v for k, v in entry.items()}
            predicate = ""
            for k in sorted(node.keys):
                if k not in members:
                    raise SchemaValidationError(f"{path}: list entry is missing key {k!r}")
                key_val = self._leaf_value(node.children[k], members[k], f"{path}/{k}")
                predicate += f"[{k}={key_val}]"
            self._walk_container(node, entry, path + predicate, leaves)

    def _leaf_or_leaf_list(self, node: SchemaNode, raw: Any, path: str) -> NVal:
        if node.kind == NodeKind.LEAF_LIST:
            if not isinstance(raw, list):
                raise SchemaValidationError(f"{path}: expected an array for leaf-list, got {raw!r}")
            return NList(tuple(self._leaf_value(node, item, path) for item in raw))
        return self._leaf_value(node, raw, path)

    def _leaf_value(self, node: SchemaNode, raw: Any, path: str) -> NVal:
        t = node.type
        bad = SchemaValidationError(f"{path}: value {raw!r} is not a valid {t}")

        if t in INT_RANGES:
            # RFC7951 encodes int64/uint64 as strings.
            if isinstance(raw, str):
                try:
                    raw = int(raw)
                except ValueError:
                    raise bad from None
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise bad
            if isinstance(raw, float) and not raw.is_integer():
                raise bad
            lo, hi = INT_RANGES[t]
            if not lo <= raw <= hi:
                raise SchemaValidationError(f"{path}: value {raw!r} out of range for {t}")
            return NNumber(raw)
        if t == "decimal64":
            if isinstance(raw, str):
                try:
                    raw = float(raw)
                except ValueError:
                    raise bad from None
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise bad
            return NNumber(raw)
        if t == "boolean":
            if not isinstance(raw, bool):
                raise bad
            return NBool(raw)
        if t in ("enumeration", "identityref"):
            if not isinstance(raw, str):
                raise bad
            return NString(strip_module(raw))
        if t in ("string", "binary"):
            if not isinstance(raw, str):
                raise bad
            return NString(raw)
        # union
        if not is_json_scalar(raw):
            raise bad
        return from_json(raw)

"""
gnmidiff.flatten — Tree flattening
==================================

Turns a hierarchical RFC7951 JSON value into a flat mapping from LeafPath
to normalized value:

    {"config": {"name": "eth0", "mtu": 1500},
     "subinterfaces": {"subinterface": [{"index": 0, "config": {"index": 0}}]}}

    → {"/config/name": NString("eth0"),
       "/config/mtu": NNumber(1500.0),
       "/subinterfaces/subinterface[index=0]/index": NNumber(0.0),
       "/subinterfaces/subinterface[index=0]/config/index": NNumber(0.0)}

Without a schema the list keys have to be inferred from the JSON shape.
This relies on the OpenConfig style guide: the direct scalar children of a
list entry are exactly its keys (everything else lives under config/ or
state/).  Predicates are emitted sorted by key name.

KNOWN AMBIGUITY
───────────────
An empty array is taken to be an empty leaf-list.  It could equally be a
list with no entries; schema-agnostic JSON carries no way to tell.  If the
guess is wrong and the same list is also updated entry by entry, the
intent builder's prefix checks reject the request.

`nest` is the inverse: it rebuilds the JSON tree from a flat mapping
produced by `flatten_json`.
"""

import json
import math
from typing import Any, Mapping, Union

from .errors import InvalidJSON
from .paths import split_elements, parse_elem, elem_to_string
from .values import NList, NVal, from_json, is_json_scalar


# ═══════════════════════════════════════════════════════════════════
#  KEY VALUES
# ═══════════════════════════════════════════════════════════════════

def key_value_as_string(v: Any) -> str:
    """
    Render a JSON scalar as a path key value.

    Integral numbers are written without a fractional part so that a JSON
    key of 0 matches the gNMI predicate [index=0].
    """
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        if not math.isfinite(v):
            raise InvalidJSON(f"cannot convert non-finite number {v!r} to a key value")
        if v.is_integer():
            return str(int(v))
        return repr(v)
    if isinstance(v, str):
        return v
    raise InvalidJSON(f"cannot convert {type(v).__name__} to a string for use in a key: {v!r}")


def _predicate(entry: Mapping[str, Any]) -> str:
    key_names = sorted(name for name, v in entry.items() if is_json_scalar(v))
    return "".join(f"[{name}={key_value_as_string(entry[name])}]" for name in key_names)


# ═══════════════════════════════════════════════════════════════════
#  FLATTEN
# ═══════════════════════════════════════════════════════════════════

def flatten_json(root: Any, base_path: str = "") -> dict[str, NVal]:
    """
    Flatten a decoded JSON value into {LeafPath: NVal}.

    A scalar or leaf-list at the top level yields a single entry keyed by
    `base_path` itself ("" when no base path is given).

    Raises InvalidJSON for lists of lists, arrays mixing objects with
    other types, null values, and unstringifiable list keys.
    """
    if base_path.endswith("/"):
        raise InvalidJSON(f"base path {base_path!r} must not end with '/'")
    leaves: dict[str, NVal] = {}
    _flatten(root, base_path, leaves)
    return leaves


def _put(leaves: dict[str, NVal], path: str, val: NVal) -> None:
    prev = leaves.get(path)
    if prev is not None and prev != val:
        raise InvalidJSON(f"leaf {path!r} set twice with different values: {prev} and {val}")
    leaves[path] = val


def _flatten(node: Any, path: str, leaves: dict[str, NVal]) -> None:
    if is_json_scalar(node):
        _put(leaves, path, from_json(node))
        return

    if isinstance(node, list):
        if not node:
            # Empty leaf-list: a list cannot be set to nothing, only deleted.
            _put(leaves, path, NList(()))
            return
        first = node[0]
        if is_json_scalar(first):
            for item in node:
                if not is_json_scalar(item):
                    raise InvalidJSON(f"array has different element types: {node!r}")
            _put(leaves, path, from_json(node))
            return
        if isinstance(first, list):
            raise InvalidJSON(f"list within a list: {node!r} contains {first!r}")
        if isinstance(first, dict):
            for entry in node:
                if not isinstance(entry, dict):
                    raise InvalidJSON(f"array has different element types: {node!r}")
                _flatten(entry, path + _predicate(entry), leaves)
            return
        raise InvalidJSON(f"unrecognized JSON type: ({type(first).__name__}, {first!r})")

    if isinstance(node, dict):
        # A container or a list entry.
        for name, child in node.items():
            if not name or "/" in name:
                raise InvalidJSON(f"invalid member name {name!r} under {path or '/'}")
            _flatten(child, f"{path}/{name}", leaves)
        return

    raise InvalidJSON(f"unrecognized JSON type: ({type(node).__name__}, {node!r})")


def _unique_members(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for name, value in pairs:
        if name in obj and obj[name] != value:
            raise InvalidJSON(f"member {name!r} repeated with different values")
        obj[name] = value
    return obj


def decode_json(data: Union[bytes, str]) -> Any:
    try:
        return json.loads(data, object_pairs_hook=_unique_members)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidJSON(f"cannot decode JSON: {e}") from e


def flatten_json_bytes(data: Union[bytes, str], base_path: str = "") -> dict[str, NVal]:
    """Decode RFC7951 JSON text and flatten it."""
    return flatten_json(decode_json(data), base_path)


# ═══════════════════════════════════════════════════════════════════
#  NEST (inverse of flatten)
# ═══════════════════════════════════════════════════════════════════

def nest(leaves: Mapping[str, NVal]) -> Any:
    """
    Rebuild the JSON tree described by a flat leaf mapping.

        nest(flatten_json(obj)) == obj

    up to key order and numeric representation (all numbers come back as
    floats).  List entries are grouped by their key predicate; the key
    leaves themselves are expected among the leaves, as `flatten_json`
    always produces them.
    """
    if "" in leaves:
        if len(leaves) != 1:
            raise InvalidJSON("a root leaf cannot coexist with other leaves")
        return leaves[""].to_python()

    # Intermediate tree: containers are dicts keyed by member name; a list
    # member is a dict keyed by ("name", predicate) tuples until the final
    # conversion below.
    tree: dict = {}
    for path, val in leaves.items():
        elems = [parse_elem(s) for s in split_elements(path)]
        if not elems:
            raise InvalidJSON(f"invalid leaf path {path!r}")
        node = tree
        for e in elems[:-1]:
            slot = (e.name, elem_to_string(e)) if e.key else e.name
            node = node.setdefault(slot, {})
        last = elems[-1]
        if last.key:
            raise InvalidJSON(f"leaf path {path!r} ends in a list entry")
        node[last.name] = val.to_python()
    return _materialize(tree)


def _materialize(node: dict) -> dict:
    out: dict[str, Any] = {}
    for slot, child in node.items():
        if isinstance(slot, tuple):
            name = slot[0]
            out.setdefault(name, []).append(_materialize(child))
        elif isinstance(child, dict):
            out[slot] = _materialize(child)
        else:
            out[slot] = child
    return out

"""
gnmidiff.paths — Leaf paths
===========================

A LeafPath is the string form of a gNMI path:

    /interfaces/interface[name=eth0]/config/mtu
    /network-instances/network-instance[name=RED]/protocols/protocol[identifier=BGP][name=15169]

Key predicates are always written sorted by key name, so two paths naming
the same node compare equal as strings.  The empty string is the root.

Prefix relationships are segment-aware: "/a/b" is an ancestor of "/a/b/c"
but not of "/a/bc".  `PrefixIndex` answers "which keys start with this
prefix?" with a sorted list and binary search.
"""

import bisect
from typing import Iterable, Iterator, Optional

from .errors import InvalidPath
from .gnmi import Path, PathElem


# ═══════════════════════════════════════════════════════════════════
#  PATH → STRING
# ═══════════════════════════════════════════════════════════════════

def elem_to_string(e: PathElem) -> str:
    if not e.name:
        raise InvalidPath(f"empty name for path element with keys {e.key}")
    s = e.name
    for k in sorted(e.key):
        if not k:
            raise InvalidPath(f"empty key name (value: {e.key[k]}) in element {e.name}")
        s += f"[{k}={e.key[k]}]"
    return s


def path_to_string(path: Optional[Path]) -> str:
    """
    Render a structured path as a LeafPath.

    The empty path (and None) render as "" so that prefix and path strings
    can simply be concatenated.
    """
    if path is None:
        return ""
    return "".join("/" + elem_to_string(e) for e in path.elem)


def join_paths(prefix: Optional[Path], path: Optional[Path]) -> str:
    """Full LeafPath of `path` relative to `prefix` (SetRequest/Notification prefix)."""
    return path_to_string(prefix) + path_to_string(path)


# ═══════════════════════════════════════════════════════════════════
#  STRING → PATH
# ═══════════════════════════════════════════════════════════════════

def split_elements(s: str) -> list[str]:
    """
    Split a path string on '/' outside of key predicates.

    Escape characters are removed from element names but kept inside
    predicates, where `parse_elem` deals with them.  Leading empty
    elements are dropped.
    """
    parts: list[str] = []
    buf: list[str] = []
    in_key = in_escape = False

    for ch in s:
        if ch == "[" and not in_escape:
            in_key = True
        elif ch == "]" and not in_escape:
            in_key = False
        elif ch == "\\" and not in_escape and not in_key:
            in_escape = True
            continue
        elif ch == "/" and not in_escape and not in_key:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
        in_escape = False

    if buf:
        parts.append("".join(buf))
    if parts and parts[0] == "":
        parts = parts[1:]
    return parts


def parse_elem(s: str) -> PathElem:
    """Parse "name[k1=v1][k2=v2]" into a PathElem."""
    name = ""
    keys: dict[str, str] = {}
    buf: list[str] = []
    current_key = ""
    in_escape = in_key = in_value = False

    for ch in s:
        if ch == "[" and not in_escape and not in_key:
            in_key = True
            if not keys and not name:
                if not buf:
                    raise InvalidPath(f"key predicate without element name in {s!r}")
                name = "".join(buf)
                buf = []
            continue
        if ch == "]" and not in_escape:
            value = "".join(buf)
            if not current_key:
                raise InvalidPath(f"empty key name for element {name!r}")
            if not value:
                raise InvalidPath(f"empty value for key {current_key!r} of element {name!r}")
            keys[current_key] = value
            buf = []
            current_key = ""
            in_key = in_value = False
            continue
        if ch == "\\" and not in_escape:
            in_escape = True
            continue
        if ch == "=" and in_key and not in_escape and not in_value:
            current_key = "".join(buf)
            buf = []
            in_value = True
            continue
        buf.append(ch)
        in_escape = False

    if not name:
        name = "".join(buf)
    elif buf:
        raise InvalidPath(f"trailing garbage following keys in element {name!r}: {''.join(buf)!r}")
    if not name:
        raise InvalidPath(f"empty element name in {s!r}")
    return PathElem(name, keys)


def string_to_path(s: str) -> Path:
    """
    Parse a path string into a structured Path.

        string_to_path("/a/b[k=v]/c")
        → Path((PathElem("a"), PathElem("b", {"k": "v"}), PathElem("c")))
    """
    return Path(tuple(parse_elem(p) for p in split_elements(s)))


# ═══════════════════════════════════════════════════════════════════
#  PREFIX RELATIONSHIPS
# ═══════════════════════════════════════════════════════════════════

def is_strict_descendant(path: str, ancestor: str) -> bool:
    return path.startswith(ancestor + "/")


def is_within(path: str, ancestor: str) -> bool:
    """True if `path` is `ancestor` itself or lies in its subtree."""
    return path == ancestor or is_strict_descendant(path, ancestor)


class PrefixIndex:
    """
    A sorted set of path strings supporting prefix search.

    All keys sharing a string prefix are contiguous in sorted order, so a
    search is one bisect plus a scan over the matches.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._keys: list[str] = sorted(set(paths))

    def add(self, path: str) -> None:
        i = bisect.bisect_left(self._keys, path)
        if i == len(self._keys) or self._keys[i] != path:
            self._keys.insert(i, path)

    def search(self, prefix: str) -> list[str]:
        """All keys that start with `prefix` (plain string prefix)."""
        i = bisect.bisect_left(self._keys, prefix)
        matches = []
        while i < len(self._keys) and self._keys[i].startswith(prefix):
            matches.append(self._keys[i])
            i += 1
        return matches

    def descendants(self, path: str) -> list[str]:
        """All keys strictly below `path` in the tree."""
        return self.search(path + "/")

    def __contains__(self, path: object) -> bool:
        i = bisect.bisect_left(self._keys, path)
        return i < len(self._keys) and self._keys[i] == path

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"PrefixIndex(len={len(self._keys)})"

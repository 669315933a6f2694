"""
gnmidiff.values — Normalized leaf values
========================================

Leaf values arrive in two shapes: RFC7951 JSON (inside json/json_ietf
TypedValues) and typed protobuf scalars.  To compare them they are first
normalized into one small algebraic type:

    NString("eth0")                    JSON string, enum, identityref, base64 binary
    NBool(True)                        JSON true/false
    NNumber(1500.0)                    every numeric kind, as a float
    NList((NNumber(42.0), ...))        leaf-lists, order significant

Equality is structural (frozen dataclasses), and distinct variants never
compare equal, so `NBool(True) != NNumber(1.0)` even though Python's own
`True == 1`.

NUMBERS
───────
int_val, uint_val, double_val, float_val and decimal_val all become
NNumber(float).  This is lossy: a YANG int64/uint64 is a JSON *string* in
RFC7951 but a number on the wire, and nothing at this layer can tell the
two apart.  decimal64 is normalized to a float as well, for consistency
with the other numeric kinds.
"""

import base64
import json
import math
from dataclasses import dataclass
from typing import Any

from .errors import NotAScalar
from .gnmi import Decimal64, TypedValue


# ═══════════════════════════════════════════════════════════════════
#  NORMALIZED VALUE TYPES
# ═══════════════════════════════════════════════════════════════════

class NVal:
    """Base class for normalized values.  Not instantiated directly."""
    __slots__ = ()

    def to_python(self) -> Any:
        """The equivalent plain JSON-compatible Python value."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class NString(NVal):
    val: str

    def to_python(self) -> str:
        return self.val

    def __str__(self) -> str:
        return self.val


@dataclass(frozen=True, slots=True)
class NBool(NVal):
    val: bool

    def to_python(self) -> bool:
        return self.val

    def __str__(self) -> str:
        return "true" if self.val else "false"


@dataclass(frozen=True, slots=True)
class NNumber(NVal):
    val: float

    def __post_init__(self):
        object.__setattr__(self, "val", float(self.val))

    def to_python(self) -> float:
        return self.val

    def __str__(self) -> str:
        v = self.val
        if math.isfinite(v) and v.is_integer() and abs(v) < 1e21:
            return str(int(v))
        return repr(v)


@dataclass(frozen=True, slots=True)
class NList(NVal):
    """An ordered leaf-list.  Reordering is a real difference."""
    items: tuple[NVal, ...]

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return "[" + " ".join(str(item) for item in self.items) + "]"


# ═══════════════════════════════════════════════════════════════════
#  JSON → NVal
# ═══════════════════════════════════════════════════════════════════

def is_json_scalar(obj: Any) -> bool:
    return isinstance(obj, (str, bool, int, float))


def from_json(obj: Any) -> NVal:
    """
    Normalize a decoded JSON scalar or array of scalars.

    Objects (and arrays containing them) are containers, not leaf values,
    and raise NotAScalar.
    """
    if isinstance(obj, bool):  # before int: bool is a subclass of int
        return NBool(obj)
    if isinstance(obj, (int, float)):
        return NNumber(obj)
    if isinstance(obj, str):
        return NString(obj)
    if isinstance(obj, list):
        return NList(tuple(from_json(item) for item in obj))
    raise NotAScalar(f"JSON value of type {type(obj).__name__} is not a scalar: {obj!r}")


# ═══════════════════════════════════════════════════════════════════
#  TypedValue → NVal
# ═══════════════════════════════════════════════════════════════════

def binary_base64(b: bytes) -> str:
    """Standard-alphabet, padded base64, as RFC7951 encodes binary."""
    return base64.b64encode(b).decode("ascii")


def from_typed_value(tv: TypedValue) -> NVal:
    """
    Normalize a wire-level scalar TypedValue.

    json/json_ietf, any and proto_bytes payloads are not scalars and raise
    NotAScalar; JSON payloads go through the tree flattener instead.
    """
    if tv is None:
        raise NotAScalar("TypedValue has no value set")
    kind, v = tv.kind, tv.value
    if kind in ("string_val", "ascii_val"):
        return NString(v)
    if kind == "bool_val":
        return NBool(bool(v))
    if kind in ("int_val", "uint_val"):
        # NOTE: an int64/uint64 YANG leaf should compare as a JSON string,
        # but TypedValue does not say which YANG type it carried.
        return NNumber(v)
    if kind in ("double_val", "float_val"):
        return NNumber(v)
    if kind == "decimal_val":
        if isinstance(v, Decimal64):
            return NNumber(float(v))
        return NNumber(v)
    if kind == "bytes_val":
        return NString(binary_base64(v))
    if kind == "leaflist_val":
        return NList(tuple(from_typed_value(e) for e in v))
    raise NotAScalar(f"TypedValue type {kind} is not a scalar type")


def to_json_text(val: NVal) -> str:
    """Compact JSON text for a value, used when quoting for display."""
    return json.dumps(val.to_python(), ensure_ascii=False)

"""
gnmidiff.gnmi — The gNMI messages the diff core consumes
=========================================================

Plain frozen dataclasses mirroring the subset of gNMI (`Path`, `TypedValue`,
`Update`, `Notification`, `SetRequest`) used by intent building and diffing.
The core only ever sees these; converting from protobuf objects happens at
the parsing boundary (see `gnmidiff.gnmiparse`).

`TypedValue` mirrors the protobuf `oneof value`: `kind` is the name of the
populated field and `value` its payload.

    TypedValue.of_string("eth0")     → TypedValue("string_val", "eth0")
    TypedValue.of_uint(42)           → TypedValue("uint_val", 42)
    TypedValue.of_json_ietf({"a": 1}) → TypedValue("json_ietf_val", b'{"a": 1}')
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional


SCALAR_KINDS = frozenset({
    "string_val", "int_val", "uint_val", "bool_val", "bytes_val",
    "float_val", "double_val", "decimal_val", "leaflist_val", "ascii_val",
})

JSON_KINDS = frozenset({"json_val", "json_ietf_val"})

ALL_KINDS = SCALAR_KINDS | JSON_KINDS | {"any_val", "proto_bytes"}


@dataclass(frozen=True)
class PathElem:
    """One element of a structured path: a name plus list-key predicates."""
    name: str
    key: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Path:
    elem: tuple[PathElem, ...] = ()
    origin: str = ""

    def __post_init__(self):
        object.__setattr__(self, "elem", tuple(self.elem))


@dataclass(frozen=True)
class Decimal64:
    """A decimal64 as carried on the wire: digits × 10^-precision."""
    digits: int
    precision: int

    def __float__(self) -> float:
        return self.digits / (10 ** self.precision)


@dataclass(frozen=True)
class TypedValue:
    kind: str
    value: Any

    def __post_init__(self):
        if self.kind not in ALL_KINDS:
            raise ValueError(f"unknown TypedValue kind: {self.kind!r}")
        if self.kind == "leaflist_val":
            object.__setattr__(self, "value", tuple(self.value))

    @property
    def is_json(self) -> bool:
        return self.kind in JSON_KINDS

    @classmethod
    def of_string(cls, v: str) -> "TypedValue":
        return cls("string_val", v)

    @classmethod
    def of_int(cls, v: int) -> "TypedValue":
        return cls("int_val", v)

    @classmethod
    def of_uint(cls, v: int) -> "TypedValue":
        return cls("uint_val", v)

    @classmethod
    def of_bool(cls, v: bool) -> "TypedValue":
        return cls("bool_val", v)

    @classmethod
    def of_bytes(cls, v: bytes) -> "TypedValue":
        return cls("bytes_val", v)

    @classmethod
    def of_double(cls, v: float) -> "TypedValue":
        return cls("double_val", v)

    @classmethod
    def of_decimal(cls, digits: int, precision: int) -> "TypedValue":
        return cls("decimal_val", Decimal64(digits, precision))

    @classmethod
    def of_leaf_list(cls, *elements: "TypedValue") -> "TypedValue":
        return cls("leaflist_val", elements)

    @classmethod
    def of_json_ietf(cls, obj: Any) -> "TypedValue":
        """Encode a Python object as an RFC7951 JSON_IETF payload."""
        return cls("json_ietf_val", json.dumps(obj).encode())


@dataclass(frozen=True)
class Update:
    path: Path
    val: Optional[TypedValue] = None


@dataclass(frozen=True)
class Notification:
    timestamp: int = 0
    prefix: Optional[Path] = None
    update: tuple[Update, ...] = ()
    delete: tuple[Path, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "update", tuple(self.update))
        object.__setattr__(self, "delete", tuple(self.delete))


@dataclass(frozen=True)
class SetRequest:
    prefix: Optional[Path] = None
    delete: tuple[Path, ...] = ()
    replace: tuple[Update, ...] = ()
    update: tuple[Update, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "delete", tuple(self.delete))
        object.__setattr__(self, "replace", tuple(self.replace))
        object.__setattr__(self, "update", tuple(self.update))

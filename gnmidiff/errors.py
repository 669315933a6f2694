"""
gnmidiff.errors — Error taxonomy
================================

Every failure raised by gnmidiff derives from `GnmiDiffError`, so callers
can catch the whole family at once or a single class when they care about
the reason.  The core is all-or-nothing: an exception means no intent and
no diff were produced.

    NotAScalar             structured value where a scalar was required
    InvalidJSON            JSON tree of a shape that cannot be flattened
    InvalidPath            malformed gNMI path or path string
    ConflictingDelete      the same path deleted twice
    ConflictingReplace     overlapping delete/replace claims
    BadSetRequest          leaf updates that overlap or disagree
    UnsupportedDelete      deletes inside Notifications
    SchemaInvalid          the schema collaborator itself is malformed
    SchemaValidationError  a value does not conform to the schema
    GnmiParseError         textproto input could not be parsed
    ConfigError            bad CLI configuration
"""

__all__ = [
    "GnmiDiffError",
    "NotAScalar",
    "InvalidJSON",
    "InvalidPath",
    "ConflictingDelete",
    "ConflictingReplace",
    "BadSetRequest",
    "UnsupportedDelete",
    "SchemaInvalid",
    "SchemaValidationError",
    "GnmiParseError",
    "ConfigError",
    "format_error",
]


class GnmiDiffError(Exception):
    """Base class for all errors raised by gnmidiff."""
    pass


class NotAScalar(GnmiDiffError):
    """A container-typed value was given where a scalar was expected."""
    pass


class InvalidJSON(GnmiDiffError):
    """List of lists, heterogeneous array, unstringifiable key, bad syntax."""
    pass


class InvalidPath(GnmiDiffError):
    """Empty element/key names, trailing '/', garbage after predicates."""
    pass


class ConflictingDelete(GnmiDiffError):
    pass


class ConflictingReplace(GnmiDiffError):
    pass


class BadSetRequest(GnmiDiffError):
    """Leaf updates with a prefix relationship, or a leaf set twice."""
    pass


class UnsupportedDelete(GnmiDiffError):
    pass


class SchemaInvalid(GnmiDiffError):
    pass


class SchemaValidationError(GnmiDiffError):
    pass


class GnmiParseError(GnmiDiffError):
    pass


class ConfigError(GnmiDiffError):
    pass


def format_error(e: BaseException) -> str:
    """Return a short operator-facing message like 'InvalidPath: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name

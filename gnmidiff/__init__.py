"""
gnmidiff — Intent diffing for gNMI
==================================

Answers two questions about gNMI configuration:

    Do these two SetRequests mean the same thing?
    Did the device end up in the state a SetRequest asked for?

Each SetRequest is reduced to its minimal *intent*: the set of subtrees it
deletes and the value of every leaf it writes.  Intents are then compared
leaf by leaf, against another intent or against the leaves reported by
Notifications.

    diff = diff_set_requests(a, b)
    print(diff.format(Format(full=True)))

    StructuredDiff(-A, +B):
    m /system/config/hostname:
      - "a"
      + "b"

JSON values are flattened without a schema by following the OpenConfig
convention that the direct scalar children of a list entry are its keys.
Pass a `SchemaBinder` (for example a `SchemaTree`) to take keys and types
from a schema instead.
"""

from gnmidiff.errors import (
    GnmiDiffError, NotAScalar, InvalidJSON, InvalidPath,
    ConflictingDelete, ConflictingReplace, BadSetRequest, UnsupportedDelete,
    SchemaInvalid, SchemaValidationError, GnmiParseError, ConfigError,
    format_error,
)
from gnmidiff.gnmi import (
    Path, PathElem, TypedValue, Decimal64, Update, Notification, SetRequest,
)
from gnmidiff.paths import path_to_string, string_to_path, PrefixIndex
from gnmidiff.values import NVal, NString, NBool, NNumber, NList
from gnmidiff.flatten import flatten_json, nest
from gnmidiff.schema import (
    SchemaBinder, SchemaTree, NodeKind, container, yang_list, leaf, leaf_list,
)
from gnmidiff.intent import Intent, build_intent, set_request_intent, notification_updates
from gnmidiff.diff import (
    MismatchedUpdate, DeleteDiff, UpdateDiff, StructuredDiff, SetToNotifsDiff,
    diff_intents, diff_intent_to_notifications,
    diff_set_requests, diff_set_request_to_notifications, diff_notifications,
)
from gnmidiff.formatting import Format

__version__ = "0.1.0"
__all__ = [
    "GnmiDiffError", "NotAScalar", "InvalidJSON", "InvalidPath",
    "ConflictingDelete", "ConflictingReplace", "BadSetRequest",
    "UnsupportedDelete", "SchemaInvalid", "SchemaValidationError",
    "GnmiParseError", "ConfigError", "format_error",
    "Path", "PathElem", "TypedValue", "Decimal64", "Update", "Notification", "SetRequest",
    "path_to_string", "string_to_path", "PrefixIndex",
    "NVal", "NString", "NBool", "NNumber", "NList",
    "flatten_json", "nest",
    "SchemaBinder", "SchemaTree", "NodeKind", "container", "yang_list", "leaf", "leaf_list",
    "Intent", "build_intent", "set_request_intent", "notification_updates",
    "MismatchedUpdate", "DeleteDiff", "UpdateDiff", "StructuredDiff", "SetToNotifsDiff",
    "diff_intents", "diff_intent_to_notifications",
    "diff_set_requests", "diff_set_request_to_notifications", "diff_notifications",
    "Format",
]

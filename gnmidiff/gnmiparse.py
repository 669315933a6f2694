"""
gnmidiff.gnmiparse — gNMI textproto input
=========================================

Reads SetRequests and Notifications written as protobuf text format and
converts them into the plain message types of `gnmidiff.gnmi`.

A notifications file holds one or more blocks separated by blank lines.
Each block is a SubscribeResponse, or failing that a GetResponse:

    update {
      timestamp: 42
      update { path { elem { name: "system" } } val { json_ietf_val: "..." } }
    }

    sync_response: true

SubscribeResponses without an `update` (sync_response, error) carry no
data and are skipped.
"""

import logging
from typing import Iterable, Optional

from google.protobuf import text_format
from pygnmi.spec.v080 import gnmi_pb2

from .errors import GnmiParseError
from .gnmi import (
    ALL_KINDS, Decimal64, Notification, Path, PathElem, SetRequest,
    TypedValue, Update,
)
from .paths import parse_elem

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PROTO → MESSAGE MIRROR
# ═══════════════════════════════════════════════════════════════════

def path_from_proto(p) -> Optional[Path]:
    """
    Convert a gnmi_pb2.Path.

    Paths using the pre-0.4.0 `element` field are accepted; each element
    string may carry key predicates ("interface[name=eth0]").
    """
    if p is None:
        return None
    if p.elem:
        elems = tuple(PathElem(e.name, dict(e.key)) for e in p.elem)
    else:
        elems = tuple(parse_elem(s) for s in p.element)
    return Path(elems, p.origin)


def typed_value_from_proto(tv) -> Optional[TypedValue]:
    kind = tv.WhichOneof("value")
    if kind is None:
        return None
    if kind not in ALL_KINDS:
        raise GnmiParseError(f"unsupported TypedValue field {kind!r}")
    v = getattr(tv, kind)
    if kind == "decimal_val":
        v = Decimal64(v.digits, v.precision)
    elif kind == "leaflist_val":
        v = tuple(_leaf_list_element(e) for e in v.element)
    elif kind == "any_val":
        v = v.SerializeToString()
    return TypedValue(kind, v)


def _leaf_list_element(e) -> TypedValue:
    tv = typed_value_from_proto(e)
    if tv is None:
        raise GnmiParseError("leaf-list element has no value")
    return tv


def _updates(updates: Iterable) -> tuple[Update, ...]:
    return tuple(Update(path_from_proto(u.path), typed_value_from_proto(u.val)) for u in updates)


def notification_from_proto(n) -> Notification:
    return Notification(
        timestamp=n.timestamp,
        prefix=path_from_proto(n.prefix) if n.HasField("prefix") else None,
        update=_updates(n.update),
        delete=tuple(path_from_proto(p) for p in n.delete),
    )


def set_request_from_proto(req) -> SetRequest:
    return SetRequest(
        prefix=path_from_proto(req.prefix) if req.HasField("prefix") else None,
        delete=tuple(path_from_proto(p) for p in req.delete),
        replace=_updates(req.replace),
        update=_updates(req.update),
    )


# ═══════════════════════════════════════════════════════════════════
#  TEXT INPUT
# ═══════════════════════════════════════════════════════════════════

def split_by_empty_line(text: str) -> list[str]:
    """
    Split text into blocks separated by one or more empty lines.

    Lines containing only whitespace are not separators.
    """
    blocks: list[str] = []
    current: list[str] = []
    for line in text.splitlines():
        if not line:
            if current:
                blocks.append("\n".join(current))
                current = []
            continue
        current.append(line)
    if current:
        blocks.append("\n".join(current))
    return blocks


def set_request_from_text(text: str, source: str = "<text>") -> SetRequest:
    msg = gnmi_pb2.SetRequest()
    try:
        text_format.Parse(text, msg)
    except text_format.ParseError as e:
        raise GnmiParseError(f"invalid SetRequest from {source}: {e}") from e
    logger.debug("parsed SetRequest from %s: %d deletes, %d replaces, %d updates",
                 source, len(msg.delete), len(msg.replace), len(msg.update))
    return set_request_from_proto(msg)


def set_request_from_file(filename: str) -> SetRequest:
    with open(filename, encoding="utf-8") as f:
        return set_request_from_text(f.read(), filename)


def notifications_from_text(text: str, source: str = "<text>") -> list[Notification]:
    """
    Parse blank-line separated SubscribeResponse/GetResponse blocks.

    Notifications are returned in file order.
    """
    notifs: list[Notification] = []
    for i, block in enumerate(split_by_empty_line(text)):
        resp = gnmi_pb2.SubscribeResponse()
        try:
            text_format.Parse(block, resp)
        except text_format.ParseError as sub_err:
            get_resp = gnmi_pb2.GetResponse()
            try:
                text_format.Parse(block, get_resp)
            except text_format.ParseError:
                raise GnmiParseError(
                    f"invalid Notification/SubscribeResponse from {source}: {sub_err}") from sub_err
            logger.debug("block %d of %s is a GetResponse with %d notifications",
                         i, source, len(get_resp.notification))
            notifs.extend(notification_from_proto(n) for n in get_resp.notification)
            continue
        if resp.HasField("update"):
            notifs.append(notification_from_proto(resp.update))
        else:
            logger.debug("block %d of %s has no update (%s), skipping",
                         i, source, resp.WhichOneof("response"))
    return notifs


def notifications_from_file(filename: str) -> list[Notification]:
    with open(filename, encoding="utf-8") as f:
        return notifications_from_text(f.read(), filename)
